from app.models.base import CreatedAtModel, IDModel, TimestampModel
from app.models.user import User
from app.models.profile import Profile
from app.models.refresh_token import RefreshToken
from app.models.report import Report
from app.models.lookup_entity import LookupEntity
from app.models.deepfake import DeepfakeMeta
from app.models.article import Article

__all__ = [
    'CreatedAtModel',
    'IDModel',
    'TimestampModel',
    'User',
    'Profile',
    'RefreshToken',
    'Report',
    'LookupEntity',
    'DeepfakeMeta',
    'Article',
]
