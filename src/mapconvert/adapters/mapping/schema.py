"""Pydantic models for file-based mapping documents.

The YAML and XML drivers both reduce a class definition to an
`EntityMappingDocument`; keys use the camelCase spelling found in mapping files.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from mapconvert.domain.model import IdGeneratorType, InheritanceType, LifecycleEvent

type DocumentType = Literal["entity", "mappedSuperclass"]


class MappingBaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, coerce_numbers_to_str=True)


class GeneratorSchema(MappingBaseModel):
    strategy: IdGeneratorType = IdGeneratorType.AUTO


class ColumnSchema(MappingBaseModel):
    type: str = "string"
    column: str | None = None
    length: int | None = None
    precision: int | None = None
    scale: int | None = None
    nullable: bool = False
    unique: bool = False


class IdSchema(ColumnSchema):
    generator: GeneratorSchema | None = None


class JoinColumnSchema(MappingBaseModel):
    name: str
    referenced_column_name: str = Field(default="id", alias="referencedColumnName")
    nullable: bool = True
    on_delete: str | None = Field(default=None, alias="onDelete")


class JoinTableSchema(MappingBaseModel):
    name: str
    join_columns: list[JoinColumnSchema] = Field(
        default_factory=list["JoinColumnSchema"], alias="joinColumns"
    )
    inverse_join_columns: list[JoinColumnSchema] = Field(
        default_factory=list["JoinColumnSchema"], alias="inverseJoinColumns"
    )


class AssociationSchema(MappingBaseModel):
    target_entity: str = Field(alias="targetEntity")
    mapped_by: str | None = Field(default=None, alias="mappedBy")
    inversed_by: str | None = Field(default=None, alias="inversedBy")
    join_columns: list[JoinColumnSchema] = Field(
        default_factory=list["JoinColumnSchema"], alias="joinColumns"
    )
    join_table: JoinTableSchema | None = Field(default=None, alias="joinTable")
    cascade: list[str] = Field(default_factory=list[str])


class EntityMappingDocument(MappingBaseModel):
    type: DocumentType = "entity"
    table: str | None = None
    repository_class: str | None = Field(default=None, alias="repositoryClass")
    inheritance_type: InheritanceType = Field(
        default=InheritanceType.NONE, alias="inheritanceType"
    )
    discriminator_column: str | None = Field(default=None, alias="discriminatorColumn")
    discriminator_value: str | None = Field(default=None, alias="discriminatorValue")
    discriminator_map: dict[str, str] = Field(
        default_factory=dict[str, str], alias="discriminatorMap"
    )
    parent_classes: list[str] = Field(default_factory=list[str], alias="parentClasses")
    identifiers: dict[str, IdSchema] = Field(
        default_factory=dict[str, IdSchema], alias="id"
    )
    field_mappings: dict[str, ColumnSchema] = Field(
        default_factory=dict[str, ColumnSchema], alias="fields"
    )
    one_to_one: dict[str, AssociationSchema] = Field(
        default_factory=dict[str, AssociationSchema], alias="oneToOne"
    )
    many_to_one: dict[str, AssociationSchema] = Field(
        default_factory=dict[str, AssociationSchema], alias="manyToOne"
    )
    one_to_many: dict[str, AssociationSchema] = Field(
        default_factory=dict[str, AssociationSchema], alias="oneToMany"
    )
    many_to_many: dict[str, AssociationSchema] = Field(
        default_factory=dict[str, AssociationSchema], alias="manyToMany"
    )
    lifecycle_callbacks: dict[LifecycleEvent, list[str]] = Field(
        default_factory=dict[LifecycleEvent, list[str]], alias="lifecycleCallbacks"
    )

    @property
    def is_mapped_superclass(self) -> bool:
        return self.type == "mappedSuperclass"

    def to_mapping(self) -> dict[str, object]:
        """Serialise with file-format keys, keeping `type` first and omitting defaults."""

        payload = self.model_dump(mode="json", by_alias=True, exclude_defaults=True)
        payload.pop("type", None)
        return {"type": self.type, **payload}
