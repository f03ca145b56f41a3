"""Async PostgreSQL repositories using asyncpg connection pooling"""

from database.repositories_async.base import BaseRepository
from database.repositories_async.civic import (
    CommitteeRepository,
    ContributionRepository,
    ExpenditureRepository,
    ExternalRecordRepository,
    IndependentExpenditureRepository,
    MeetingRepository,
    PropositionRepository,
    RepresentativeRepository,
)
from database.repositories_async.region_plugins import RegionPluginRepository

__all__ = [
    "BaseRepository",
    "CommitteeRepository",
    "ContributionRepository",
    "ExpenditureRepository",
    "ExternalRecordRepository",
    "IndependentExpenditureRepository",
    "MeetingRepository",
    "PropositionRepository",
    "RegionPluginRepository",
    "RepresentativeRepository",
]
