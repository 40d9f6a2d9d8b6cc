from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

import mysql.connector

# Absence inserts rely on next-key locks taken by SELECT ... FOR UPDATE on an empty range.
DEFAULT_ISOLATION_LEVEL = "REPEATABLE READ"


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    isolation_level: str = DEFAULT_ISOLATION_LEVEL
    connect_timeout: int = 10

    @classmethod
    def from_settings(cls, db_config: Mapping[str, Any]) -> "DBConfig":
        return cls(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config["password"]),
            database=str(db_config["database"]),
            isolation_level=str(db_config.get("isolation_level", DEFAULT_ISOLATION_LEVEL)),
            connect_timeout=int(db_config.get("connect_timeout", 10)),
        )


class DatabaseConnection:
    """Connection factory shared by the directory and attendance repositories.

    Every repository call opens a short-lived connection and runs one explicit transaction at
    ``isolation_level``, so a batch never holds row locks between records.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    @property
    def isolation_level(self) -> str:
        return self._config.isolation_level

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            connection_timeout=self._config.connect_timeout,
            autocommit=False,
        )
