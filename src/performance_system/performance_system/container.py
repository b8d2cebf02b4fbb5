from __future__ import annotations

from dataclasses import dataclass

from .database.connection import DBConfig, DatabaseConnection
from .inspections.mysql_inspection_repository import MySQLInspectionRepository
from .inspections.repository import InspectionRepository
from .inspections.service import InspectionImportService, InspectionQueryService
from .organization.mysql_organization_repository import MySQLOrganizationRepository
from .organization.repository import OrganizationRepository
from .performance.aggregator import PeriodAggregator
from .performance.generation import BatchGenerationService, GenerationDefaults
from .performance.mysql_performance_repository import MySQLPerformanceRepository
from .performance.repository import PerformanceRepository
from .performance.scoring.weighted_scorer import WeightedCompositeScorer
from .performance.service import PerformanceService
from .performance.store import PerformanceRecordStore
from .scope.resolver import ScopeResolver
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    organization_repo: OrganizationRepository
    inspections_repo: InspectionRepository

    scope: ScopeResolver
    auth_service: AuthService
    user_service: UserService
    import_service: InspectionImportService
    inspection_query_service: InspectionQueryService
    performance_service: PerformanceService
    generation_service: BatchGenerationService


def wire_container(
    *,
    users_repo: UserRepository,
    organization_repo: OrganizationRepository,
    inspections_repo: InspectionRepository,
    performance_repo: PerformanceRepository,
    defaults: GenerationDefaults | None = None,
) -> Container:
    """Build services on top of any repository implementations (MySQL or in-memory)."""
    scope = ScopeResolver()
    scorer = WeightedCompositeScorer()
    store = PerformanceRecordStore(performance_repo, scorer)
    aggregator = PeriodAggregator(inspections_repo)

    return Container(
        users_repo=users_repo,
        organization_repo=organization_repo,
        inspections_repo=inspections_repo,
        scope=scope,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo, scope),
        import_service=InspectionImportService(inspections_repo, users_repo, organization_repo, scope),
        inspection_query_service=InspectionQueryService(inspections_repo, scope),
        performance_service=PerformanceService(store, aggregator, users_repo, organization_repo, scope, scorer),
        generation_service=BatchGenerationService(
            users_repo,
            organization_repo,
            aggregator,
            store,
            scope,
            scorer,
            defaults=defaults,
        ),
    )


def build_container(*, db_config: dict, defaults: GenerationDefaults | None = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return wire_container(
        users_repo=MySQLUserRepository(conn),
        organization_repo=MySQLOrganizationRepository(conn),
        inspections_repo=MySQLInspectionRepository(conn),
        performance_repo=MySQLPerformanceRepository(conn),
        defaults=defaults,
    )
