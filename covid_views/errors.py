from typing import Optional, Tuple, Any


class FormatError(ValueError):
    # Raised while loading when a row cannot be turned into a typed record
    def __init__(self, message: str, row: Optional[int] = None, field: Optional[str] = None):
        self.row = row
        self.field = field
        where = []
        if row is not None:
            where.append(f"row {row}")
        if field is not None:
            where.append(f"field '{field}'")
        if where:
            message = f"{message} ({', '.join(where)})"
        super().__init__(message)


class JoinKeyCollision(ValueError):
    # More than one row for the same (location, date) key in one table
    def __init__(self, key: Tuple[Any, ...], table: str = "table"):
        self.key = key
        self.table = table
        super().__init__(f"Duplicate key {key} in {table}; keys must be unique.")
