from enum import Enum
import sqlalchemy as sa
from sqlalchemy import Column


class UserRole(str, Enum):
    USER = 'user'


class ReportCategory(str, Enum):
    FRAUD = 'fraud'
    PHISHING = 'phishing'
    HARASSMENT = 'harassment'
    DEEPFAKE = 'deepfake'


class ReportStatus(str, Enum):
    PENDING = 'pending'
    INVESTIGATING = 'investigating'
    RESOLVED = 'resolved'


class EntityType(str, Enum):
    EMAIL = 'email'
    PHONE = 'phone'
    WEBSITE = 'website'


def enum_column(enum_cls: type[Enum], name: str, index: bool = False) -> Column:
    return Column(
        sa.Enum(
            enum_cls,
            values_callable=lambda enum: [item.value for item in enum],
            name=name,
        ),
        nullable=False,
        index=index,
    )
