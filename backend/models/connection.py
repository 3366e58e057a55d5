"""Pydantic schemas for database connection requests."""
from typing import Optional, Literal
from pydantic import BaseModel, Field


class ConnectionRequest(BaseModel):
    db_type: Literal["sqlite", "postgresql"] = Field("postgresql", description="Database engine type")

    # Full SQLAlchemy URL; takes precedence over the discrete fields below
    connection_url: Optional[str] = Field(None, description="SQLAlchemy database URL")

    # SQLite only
    file_path: Optional[str] = Field(None, description="Absolute path to .db file (SQLite only)")

    # PostgreSQL only
    host: Optional[str] = Field(None, description="Database host")
    port: Optional[int] = Field(5432, description="Database port")
    database: Optional[str] = Field(None, description="Database name")
    username: Optional[str] = Field(None, description="Username")
    password: Optional[str] = Field(None, description="Password")

    schema_name: Optional[str] = Field(None, description="Schema to extract; defaults to the engine's default schema")

    def get_sqlalchemy_url(self) -> str:
        if self.connection_url:
            return self.connection_url
        if self.db_type == "sqlite":
            return f"sqlite:///{self.file_path}"
        return (
            f"postgresql+psycopg2://{self.username}:{self.password}"
            f"@{self.host}:{self.port}/{self.database}"
        )
