from __future__ import annotations

from textwrap import dedent
from typing import TYPE_CHECKING, Protocol

import pytest

from mapconvert.adapters.loading import forget_loaded_sources

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


FOO_XML = """\
<?xml version="1.0" encoding="utf-8"?>
<mapping>
  <mapped-superclass name="Base">
    <field name="created" type="datetime"/>
  </mapped-superclass>
  <entity name="Foo" table="foo">
    <id name="id" type="integer">
      <generator strategy="AUTO"/>
    </id>
    <field name="title" type="string" length="120"/>
  </entity>
</mapping>
"""

BAR_ANNOTATION = """\
from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Model(DeclarativeBase):
    pass


class Bar(Model):
    __tablename__ = "bar"

    id: Mapped[int] = mapped_column(primary_key=True)
    label: Mapped[str] = mapped_column(String(40))
"""

AUTHOR_YAML = """\
app.Author:
  type: entity
  table: authors
  id:
    id:
      type: integer
      generator:
        strategy: IDENTITY
  fields:
    name:
      type: string
      length: 80
    email:
      column: email_address
      unique: true
  oneToMany:
    posts:
      targetEntity: app.Post
      mappedBy: author
      cascade: [persist, remove]
app.Post:
  table: posts
  id:
    id:
      type: integer
  fields:
    body:
      type: text
      nullable: true
  manyToOne:
    author:
      targetEntity: app.Author
      inversedBy: posts
      joinColumns:
        - name: author_id
          onDelete: CASCADE
  lifecycleCallbacks:
    prePersist: [touch]
"""


class SourceWriter(Protocol):
    def __call__(self, directory: str, relative: str, content: str) -> Path: ...


@pytest.fixture(autouse=True)
def _fresh_source_cache() -> Iterator[None]:
    forget_loaded_sources()
    yield
    forget_loaded_sources()


@pytest.fixture
def write_source(tmp_path: Path) -> SourceWriter:
    def _write(directory: str, relative: str, content: str) -> Path:
        path = tmp_path / directory / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(content), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def xml_dir(write_source: SourceWriter) -> Path:
    return write_source("xml", "Foo.orm.xml", FOO_XML).parent


@pytest.fixture
def annotation_dir(write_source: SourceWriter) -> Path:
    return write_source("annotation", "bar.py", BAR_ANNOTATION).parent


@pytest.fixture
def yaml_dir(write_source: SourceWriter) -> Path:
    return write_source("yaml", "app/blog.orm.yml", AUTHOR_YAML).parent.parent
