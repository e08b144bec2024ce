from pydantic import BaseModel, field_validator


class BackupConfig(BaseModel):
    """
    Einstellungen für die Sicherungskopien vor jedem Schreibzugriff.
    Die Kopien liegen flach im Unterverzeichnis `directory_name` neben der Originaldatei.
    """
    directory_name: str = "backups"
    max_backups: int = 50

    @field_validator("max_backups")
    @classmethod
    def at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_backups muss mindestens 1 sein")
        return v
