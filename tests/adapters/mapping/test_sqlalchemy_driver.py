from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from mapconvert.adapters.loading import declared_classes, load_source_once
from mapconvert.adapters.mapping import DeclarativeReader, SqlAlchemyAnnotationDriver
from mapconvert.domain.errors import MappingError
from mapconvert.domain.model import (
    AssociationType,
    ClassMetadata,
    IdGeneratorType,
    InheritanceType,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


BLOG_MODELS = """\
from __future__ import annotations

from sqlalchemy import Column, ForeignKey, String, Table
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Model(DeclarativeBase):
    pass


post_tags = Table(
    "post_tags",
    Model.metadata,
    Column("post_id", ForeignKey("posts.id"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Author(Model):
    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(80))
    email: Mapped[str | None] = mapped_column("email_address", String(255), unique=True)
    posts: Mapped[list[Post]] = relationship(
        back_populates="author", cascade="all, delete-orphan"
    )


class Post(Model):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(primary_key=True)
    author_id: Mapped[int] = mapped_column(ForeignKey("authors.id"))
    author: Mapped[Author] = relationship(back_populates="posts")
    tags: Mapped[list[Tag]] = relationship(secondary=post_tags, back_populates="posts")


class Tag(Model):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(primary_key=True)
    posts: Mapped[list[Post]] = relationship(secondary=post_tags, back_populates="tags")


class Slugged:
    slug_length = 40
"""

INHERITANCE_MODELS = """\
from __future__ import annotations

from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Model(DeclarativeBase):
    pass


class Person(Model):
    __tablename__ = "people"
    __mapper_args__ = {"polymorphic_on": "kind", "polymorphic_identity": "person"}

    id: Mapped[int] = mapped_column(primary_key=True)
    kind: Mapped[str] = mapped_column(String(20))


class Employee(Person):
    __mapper_args__ = {"polymorphic_identity": "employee"}

    salary: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))


class Vehicle(Model):
    __tablename__ = "vehicles"
    __mapper_args__ = {"polymorphic_on": "type", "polymorphic_identity": "vehicle"}

    id: Mapped[int] = mapped_column(primary_key=True)
    type: Mapped[str] = mapped_column(String(20))


class Car(Vehicle):
    __tablename__ = "cars"
    __mapper_args__ = {"polymorphic_identity": "car"}

    id: Mapped[int] = mapped_column(ForeignKey("vehicles.id"), primary_key=True)
    doors: Mapped[int]
"""


def _load(
    write_source: Callable[[str, str, str], Path], content: str, namespace: str = ""
) -> tuple[SqlAlchemyAnnotationDriver, dict[str, ClassMetadata]]:
    module = load_source_once(write_source("models", "models.py", content))
    driver = SqlAlchemyAnnotationDriver(DeclarativeReader(default_namespace=namespace))
    loaded: dict[str, ClassMetadata] = {}
    for cls in declared_classes(module):
        if driver.is_transient(cls):
            continue
        metadata = ClassMetadata(name=driver.reader.entity_name(cls))
        driver.load_metadata_for_class(cls, metadata)
        loaded[cls.__name__] = metadata
    return driver, loaded


def test_transient_classes(write_source: Callable[[str, str, str], Path]) -> None:
    module = load_source_once(write_source("models", "models.py", BLOG_MODELS))
    driver = SqlAlchemyAnnotationDriver(DeclarativeReader())
    classes = {cls.__name__: cls for cls in declared_classes(module)}

    assert list(classes) == ["Model", "Author", "Post", "Tag", "Slugged"]
    assert driver.is_transient(classes["Model"])
    assert driver.is_transient(classes["Slugged"])
    assert not driver.is_transient(classes["Author"])
    with pytest.raises(MappingError, match="Slugged"):
        driver.load_metadata_for_class(classes["Slugged"], ClassMetadata(name="Slugged"))


def test_reads_columns(write_source: Callable[[str, str, str], Path]) -> None:
    _, loaded = _load(write_source, BLOG_MODELS, namespace="blog")
    author = loaded["Author"]

    assert author.name == "blog.Author"
    assert author.table_name == "authors"
    assert list(author.fields) == ["id", "name", "email"]
    assert author.identifier == ["id"]
    assert author.id_generator is IdGeneratorType.AUTO
    email = author.fields["email"]
    assert (email.column_name, email.type, email.length, email.unique, email.nullable) == (
        "email_address",
        "string",
        255,
        True,
        True,
    )
    assert not author.fields["name"].nullable


def test_reads_to_many_and_to_one_associations(
    write_source: Callable[[str, str, str], Path],
) -> None:
    _, loaded = _load(write_source, BLOG_MODELS, namespace="blog")

    posts = loaded["Author"].associations["posts"]
    assert posts.type is AssociationType.ONE_TO_MANY
    assert posts.target_entity == "blog.Post"
    assert posts.mapped_by == "author"
    assert posts.cascade == ("detach", "merge", "orphan-removal", "persist", "refresh", "remove")

    author = loaded["Post"].associations["author"]
    assert author.type is AssociationType.MANY_TO_ONE
    assert author.inversed_by == "posts"
    assert author.cascade == ()
    [join_column] = author.join_columns
    assert (join_column.name, join_column.referenced_column_name, join_column.nullable) == (
        "author_id",
        "id",
        False,
    )


def test_many_to_many_owner_gets_join_table(
    write_source: Callable[[str, str, str], Path],
) -> None:
    _, loaded = _load(write_source, BLOG_MODELS)

    owning = loaded["Post"].associations["tags"]
    inverse = loaded["Tag"].associations["posts"]

    assert owning.type is inverse.type is AssociationType.MANY_TO_MANY
    assert owning.is_owning_side
    assert owning.inversed_by == "posts"
    assert owning.join_table is not None
    assert owning.join_table.name == "post_tags"
    assert [c.name for c in owning.join_table.join_columns] == ["post_id"]
    [inverse_column] = owning.join_table.inverse_join_columns
    assert (inverse_column.name, inverse_column.on_delete) == ("tag_id", "CASCADE")
    assert inverse.mapped_by == "tags"
    assert inverse.join_table is None


def test_single_table_inheritance(write_source: Callable[[str, str, str], Path]) -> None:
    _, loaded = _load(write_source, INHERITANCE_MODELS)
    person, employee = loaded["Person"], loaded["Employee"]

    assert person.inheritance_type is InheritanceType.SINGLE_TABLE
    assert person.discriminator_column == "kind"
    assert person.discriminator_value == "person"
    assert person.discriminator_map == {"person": "Person", "employee": "Employee"}

    assert employee.table_name is None
    assert employee.parent_classes == ["Person"]
    assert employee.inheritance_type is InheritanceType.SINGLE_TABLE
    assert employee.discriminator_value == "employee"
    assert list(employee.fields) == ["salary"]
    salary = employee.fields["salary"]
    assert (salary.type, salary.precision, salary.scale, salary.nullable) == (
        "decimal",
        10,
        2,
        True,
    )


def test_joined_inheritance(write_source: Callable[[str, str, str], Path]) -> None:
    _, loaded = _load(write_source, INHERITANCE_MODELS)
    vehicle, car = loaded["Vehicle"], loaded["Car"]

    assert vehicle.inheritance_type is InheritanceType.JOINED
    assert car.inheritance_type is InheritanceType.JOINED
    assert car.table_name == "cars"
    assert car.parent_classes == ["Vehicle"]
    assert set(car.fields) == {"id", "doors"}
    assert car.fields["doors"].type == "integer"


def test_abstract_classes_are_mapped_superclasses(
    write_source: Callable[[str, str, str], Path],
) -> None:
    driver, loaded = _load(
        write_source,
        """\
        from __future__ import annotations

        from sqlalchemy import Column, Integer
        from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


        class Model(DeclarativeBase):
            pass


        class Audited(Model):
            __abstract__ = True

            revision = Column(Integer, nullable=False)
            note: Mapped[str | None] = mapped_column()
        """,
    )

    audited = loaded["Audited"]
    assert audited.is_mapped_superclass
    assert audited.fields["revision"].type == "integer"
    assert audited.fields["note"].type == "string"
    assert driver.is_transient(object)
