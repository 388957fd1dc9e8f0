"""Database schema definitions for tfindex."""

SCHEMA_VERSION = 1

SCHEMA_SQL = """\
-- Indexed modules (root repositories and submodules)
CREATE TABLE IF NOT EXISTS modules (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    full_name TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    repo_url TEXT NOT NULL DEFAULT '',
    last_updated TEXT NOT NULL DEFAULT '',
    synced_at TEXT,
    readme_content TEXT,
    has_examples INTEGER NOT NULL DEFAULT 0,
    provider TEXT NOT NULL DEFAULT '',
    tags TEXT NOT NULL DEFAULT '[]'
);

-- Files persisted from repository archives
CREATE TABLE IF NOT EXISTS module_files (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    module_id INTEGER NOT NULL REFERENCES modules(id) ON DELETE CASCADE,
    file_name TEXT NOT NULL,
    file_path TEXT NOT NULL,
    file_type TEXT NOT NULL,
    content TEXT NOT NULL,
    size_bytes INTEGER NOT NULL DEFAULT 0,
    UNIQUE(module_id, file_path)
);

-- Structural entities
CREATE TABLE IF NOT EXISTS module_variables (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    module_id INTEGER NOT NULL REFERENCES modules(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    type TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    default_text TEXT,
    default_json TEXT,
    required INTEGER NOT NULL DEFAULT 1,
    sensitive INTEGER NOT NULL DEFAULT 0,
    source_file TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS module_outputs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    module_id INTEGER NOT NULL REFERENCES modules(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    sensitive INTEGER NOT NULL DEFAULT 0,
    source_file TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS module_resources (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    module_id INTEGER NOT NULL REFERENCES modules(id) ON DELETE CASCADE,
    type TEXT NOT NULL,
    name TEXT NOT NULL,
    provider TEXT NOT NULL DEFAULT '',
    source_file TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS module_data_sources (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    module_id INTEGER NOT NULL REFERENCES modules(id) ON DELETE CASCADE,
    type TEXT NOT NULL,
    name TEXT NOT NULL,
    provider TEXT NOT NULL DEFAULT '',
    source_file TEXT NOT NULL DEFAULT ''
);

-- Releases and their changelog entries
CREATE TABLE IF NOT EXISTS module_releases (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    module_id INTEGER NOT NULL REFERENCES modules(id) ON DELETE CASCADE,
    version TEXT NOT NULL,
    tag TEXT NOT NULL,
    release_date TEXT,
    previous_tag TEXT,
    commit_sha TEXT,
    previous_commit_sha TEXT,
    comparison_url TEXT,
    created_at TEXT NOT NULL,
    UNIQUE(module_id, version)
);

CREATE TABLE IF NOT EXISTS module_release_entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    release_id INTEGER NOT NULL REFERENCES module_releases(id) ON DELETE CASCADE,
    section TEXT NOT NULL,
    entry_key TEXT NOT NULL,
    title TEXT NOT NULL,
    order_index INTEGER NOT NULL,
    identifier TEXT,
    UNIQUE(release_id, entry_key)
);

-- Indexes for performance
CREATE INDEX IF NOT EXISTS idx_module_files_module ON module_files(module_id);
CREATE INDEX IF NOT EXISTS idx_module_variables_module ON module_variables(module_id);
CREATE INDEX IF NOT EXISTS idx_module_outputs_module ON module_outputs(module_id);
CREATE INDEX IF NOT EXISTS idx_module_resources_module ON module_resources(module_id);
CREATE INDEX IF NOT EXISTS idx_module_resources_type ON module_resources(type);
CREATE INDEX IF NOT EXISTS idx_module_data_sources_module ON module_data_sources(module_id);
CREATE INDEX IF NOT EXISTS idx_module_releases_module ON module_releases(module_id);
CREATE INDEX IF NOT EXISTS idx_module_release_entries_release ON module_release_entries(release_id);
"""


def get_schema() -> str:
    """Get the full database schema SQL.

    Returns:
        SQL schema string.
    """
    return SCHEMA_SQL
