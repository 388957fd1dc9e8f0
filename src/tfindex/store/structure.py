"""Storage of structural entities (variables, outputs, resources, data sources)."""

from ..core.types import DataSource, ModuleStructure, Output, Resource, Variable
from ..parsing.values import StaticValue
from .database import Database


class StructureRepository:
    """Repository for the structural entities of modules."""

    def __init__(self, db: Database):
        self.db = db

    def insert_structure(self, module_id: int, structure: ModuleStructure) -> None:
        """Insert every entity of a structure in one transaction."""
        with self.db.transaction() as cursor:
            cursor.executemany(
                """
                INSERT INTO module_variables
                    (module_id, name, type, description, default_text, default_json,
                     required, sensitive, source_file)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [self._variable_params(module_id, v) for v in structure.variables],
            )
            cursor.executemany(
                """
                INSERT INTO module_outputs (module_id, name, description, sensitive, source_file)
                VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (module_id, o.name, o.description, int(o.sensitive), o.source_file)
                    for o in structure.outputs
                ],
            )
            cursor.executemany(
                """
                INSERT INTO module_resources (module_id, type, name, provider, source_file)
                VALUES (?, ?, ?, ?, ?)
                """,
                [(module_id, r.type, r.name, r.provider, r.source_file) for r in structure.resources],
            )
            cursor.executemany(
                """
                INSERT INTO module_data_sources (module_id, type, name, provider, source_file)
                VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (module_id, d.type, d.name, d.provider, d.source_file)
                    for d in structure.data_sources
                ],
            )

    def insert_variable(self, module_id: int, variable: Variable) -> None:
        self.insert_structure(module_id, ModuleStructure(variables=[variable]))

    def insert_output(self, module_id: int, output: Output) -> None:
        self.insert_structure(module_id, ModuleStructure(outputs=[output]))

    def insert_resource(self, module_id: int, resource: Resource) -> None:
        self.insert_structure(module_id, ModuleStructure(resources=[resource]))

    def insert_data_source(self, module_id: int, data_source: DataSource) -> None:
        self.insert_structure(module_id, ModuleStructure(data_sources=[data_source]))

    def list_variables(self, module_id: int) -> list[Variable]:
        cursor = self.db.execute(
            "SELECT * FROM module_variables WHERE module_id = ? ORDER BY id", (module_id,)
        )
        return [self._row_to_variable(row) for row in cursor.fetchall()]

    def list_outputs(self, module_id: int) -> list[Output]:
        cursor = self.db.execute(
            "SELECT * FROM module_outputs WHERE module_id = ? ORDER BY id", (module_id,)
        )
        return [
            Output(
                name=row["name"],
                description=row["description"],
                sensitive=bool(row["sensitive"]),
                source_file=row["source_file"],
            )
            for row in cursor.fetchall()
        ]

    def list_resources(self, module_id: int) -> list[Resource]:
        cursor = self.db.execute(
            "SELECT * FROM module_resources WHERE module_id = ? ORDER BY id", (module_id,)
        )
        return [
            Resource(row["type"], row["name"], row["provider"], row["source_file"])
            for row in cursor.fetchall()
        ]

    def list_data_sources(self, module_id: int) -> list[DataSource]:
        cursor = self.db.execute(
            "SELECT * FROM module_data_sources WHERE module_id = ? ORDER BY id", (module_id,)
        )
        return [
            DataSource(row["type"], row["name"], row["provider"], row["source_file"])
            for row in cursor.fetchall()
        ]

    def get_structure(self, module_id: int) -> ModuleStructure:
        """All entities of a module, in insertion order."""
        return ModuleStructure(
            variables=self.list_variables(module_id),
            outputs=self.list_outputs(module_id),
            resources=self.list_resources(module_id),
            data_sources=self.list_data_sources(module_id),
        )

    def resource_types(self, module_id: int) -> list[str]:
        """Resource types of a module in declaration order."""
        cursor = self.db.execute(
            "SELECT type FROM module_resources WHERE module_id = ? ORDER BY id", (module_id,)
        )
        return [row["type"] for row in cursor.fetchall()]

    @staticmethod
    def _variable_params(module_id: int, variable: Variable) -> tuple:
        value = variable.default_value
        default_json = value.to_json() if value is not None else None
        return (
            module_id,
            variable.name,
            variable.type,
            variable.description,
            variable.default_text,
            default_json,
            int(variable.required),
            int(variable.sensitive),
            variable.source_file,
        )

    def _row_to_variable(self, row) -> Variable:
        default_json = row["default_json"]
        return Variable(
            name=row["name"],
            type=row["type"],
            description=row["description"],
            default_text=row["default_text"],
            default_value=StaticValue.from_json(default_json) if default_json is not None else None,
            required=bool(row["required"]),
            sensitive=bool(row["sensitive"]),
            source_file=row["source_file"],
        )
