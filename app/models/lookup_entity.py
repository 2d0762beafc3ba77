from sqlmodel import Field, SQLModel
from app.models.base import CreatedAtModel, IDModel
from app.models.enums import EntityType, enum_column


class LookupEntity(IDModel, CreatedAtModel, SQLModel, table=True):
    __tablename__ = 'lookup_entities'

    report_id: str = Field(foreign_key='reports.id', ondelete='CASCADE', index=True)
    entity_type: EntityType = Field(sa_column=enum_column(EntityType, 'entity_type', index=True))
    entity_value: str = Field(max_length=512)
