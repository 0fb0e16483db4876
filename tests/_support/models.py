"""Sample models used throughout the tests.

``User`` refers to ``Post`` and ``Address``, which are declared after it.
"""

from __future__ import annotations

import uuid

from tagorm import JSON, Date, column, model


@model
class User:
    id: int = column("primaryKey;autoIncrement", default=0)
    first_name: str = column("not null;uniqueIndex:full_name", default="")
    last_name: str = column("not null;uniqueIndex:full_name", default="")
    email: str = column("not null;unique", default="")
    age: int = column("check:age >= 0;default:18", default=18)
    birth_date: Date | None = column(default=None)
    profile: JSON = column(default_factory=JSON)
    posts: list[Post] = column(
        "foreignKey:user_id->id;onDelete:CASCADE;onUpdate:CASCADE",
        default_factory=list,
    )
    address: Address | None = column("foreignKey:user_id->id", default=None)


@model
class Post:
    id: int = column("primaryKey;autoIncrement", default=0)
    user_id: int = column("not null", default=0)
    title: str = column("type:varchar(200);not null", default="")


@model
class Address:
    id: int = column("primaryKey;autoIncrement", default=0)
    user_id: int = column("not null", default=0)
    city: str = column("not null", default="")


@model
class Book:
    id: int = column("primaryKey")
    title: str = column("not null")


@model
class Note:
    id: int = column("primaryKey;autoIncrement", default=0)
    data: dict = column(default_factory=dict)


@model
class Item:
    id: int = column("primaryKey;autoIncrement", default=0)
    name: str = column("not null", default="")


@model
class Category:
    id: int = column("primaryKey", default=0)
    name: str = column(default="")


@model
class Status:
    code: str = column("primaryKey", default="")


@model
class Account:
    __tablename__ = "ledger_accounts"

    id: uuid.UUID = column("primaryKey", default=uuid.UUID(int=0))
    owner: str = column(default="")
    balance: float = column(default=0.0)


USER_DDL = (
    "CREATE TABLE IF NOT EXISTS users (\n"
    "  id SERIAL,\n"
    "  first_name VARCHAR(255) not null,\n"
    "  last_name VARCHAR(255) not null,\n"
    "  email VARCHAR(255) not null,\n"
    "  age INTEGER CHECK (age >= 0) default 18,\n"
    "  birth_date DATE,\n"
    "  profile JSONB,\n"
    "  PRIMARY KEY (id),\n"
    "  UNIQUE (email),\n"
    "  UNIQUE(first_name, last_name)\n"
    ");"
)
