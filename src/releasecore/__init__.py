from .catalog import InMemoryRepository, ResourceCatalog
from .config import LogLevel, ReleaseCoreConfig, SchemeConfig, TreeConfig, load_config_from_env
from .exceptions import (
    ArgumentError,
    CatalogError,
    ConfigurationError,
    NotFoundError,
    ReleaseCoreError,
    ResolutionError,
    SigningError,
)
from .interfaces import ContractSigner, PolicyCompiler, Repository
from .logging import (
    ReleaseFormatter,
    ReleaseLoggerAdapter,
    get_release_logger,
    safe_preview,
    setup_logging,
)
from .models import (
    AuthScheme,
    AuthTreeNode,
    AuthTreeVersion,
    BaseUpcastResource,
    ContractRequest,
    Dependency,
    DependencyTreeNode,
    DutyStatement,
    FieldSelector,
    Policy,
    PolicyStatus,
    Release,
    ReleaseScheme,
    ReleaseVersionRef,
    ResolveContract,
    ResolveRelease,
    ResolveReleaseRequest,
    ResolveResource,
    Resource,
    ResourceStatus,
    ResourceVersion,
    ResourceVersionSummary,
    SchemeContract,
    SchemeStatus,
)
from .resources import ResourceService
from .scheme import (
    ReleaseSchemeResolver,
    apply_coverage,
    bubble_eligible_resource_ids,
    contract_coverage_rate,
    generate_scheme_id,
    statement_coverage_rate,
    validate_resolve_releases,
)
from .tree import AuthorizationTreeBuilder, DependencyTreeBuilder, find_upcast_occurrences
from .versioning import VersionResolver, is_greater, latest_version, normalize_version, resolve_max_satisfying

__all__ = [
    # Config
    'LogLevel',
    'ReleaseCoreConfig',
    'SchemeConfig',
    'TreeConfig',
    'load_config_from_env',
    # Errors
    'ArgumentError',
    'CatalogError',
    'ConfigurationError',
    'NotFoundError',
    'ReleaseCoreError',
    'ResolutionError',
    'SigningError',
    # Logging
    'ReleaseFormatter',
    'ReleaseLoggerAdapter',
    'get_release_logger',
    'safe_preview',
    'setup_logging',
    # Seams
    'ContractSigner',
    'InMemoryRepository',
    'PolicyCompiler',
    'Repository',
    'ResourceCatalog',
    # Models
    'AuthScheme',
    'AuthTreeNode',
    'AuthTreeVersion',
    'BaseUpcastResource',
    'ContractRequest',
    'Dependency',
    'DependencyTreeNode',
    'DutyStatement',
    'FieldSelector',
    'Policy',
    'PolicyStatus',
    'Release',
    'ReleaseScheme',
    'ReleaseVersionRef',
    'ResolveContract',
    'ResolveRelease',
    'ResolveReleaseRequest',
    'ResolveResource',
    'Resource',
    'ResourceStatus',
    'ResourceVersion',
    'ResourceVersionSummary',
    'SchemeContract',
    'SchemeStatus',
    # Versions and trees
    'AuthorizationTreeBuilder',
    'DependencyTreeBuilder',
    'VersionResolver',
    'find_upcast_occurrences',
    'is_greater',
    'latest_version',
    'normalize_version',
    'resolve_max_satisfying',
    # Services
    'ReleaseSchemeResolver',
    'ResourceService',
    'apply_coverage',
    'bubble_eligible_resource_ids',
    'contract_coverage_rate',
    'generate_scheme_id',
    'statement_coverage_rate',
    'validate_resolve_releases',
]
