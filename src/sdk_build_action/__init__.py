"""Drive SDK builds from CI and report per-language outcomes."""

from sdk_build_action.__version__ import __version__
from sdk_build_action.builds.evaluator import check_results, is_failing
from sdk_build_action.builds.orchestrator import BuildResults, run_builds, validate_inputs
from sdk_build_action.builds.poller import BuildPoller, PollResult, poll_builds
from sdk_build_action.builds.resolver import ParentBuilds, find_parent_builds
from sdk_build_action.builds.submitter import build_revision, submit_build
from sdk_build_action.branches.reconciler import reconcile_branch, should_reset_branch
from sdk_build_action.core.client import BuildClient
from sdk_build_action.core.config import ClientConfig, PollingConfig
from sdk_build_action.core.constants import Conclusion, FailRunOn, StepStatus
from sdk_build_action.core.exceptions import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AuthenticationError,
    BuildActionError,
    CommentError,
    ConfigurationError,
    GatewayError,
    GitError,
    NotFoundError,
    RateLimitError,
)
from sdk_build_action.core.types import (
    Branch,
    BranchRevision,
    Build,
    BuildStep,
    BuildTarget,
    Commit,
    ContentRevision,
    DocumentedSpec,
    HashRevision,
    MergeConflictPR,
    Outcome,
    Outcomes,
    RepoRef,
    Revision,
)

__all__ = [
    "__version__",
    "BuildClient",
    "ClientConfig",
    "PollingConfig",
    # orchestration
    "run_builds",
    "validate_inputs",
    "BuildResults",
    "find_parent_builds",
    "ParentBuilds",
    "should_reset_branch",
    "reconcile_branch",
    "build_revision",
    "submit_build",
    "BuildPoller",
    "PollResult",
    "poll_builds",
    "check_results",
    "is_failing",
    # constants
    "Conclusion",
    "FailRunOn",
    "StepStatus",
    # errors
    "BuildActionError",
    "ConfigurationError",
    "GatewayError",
    "APIStatusError",
    "NotFoundError",
    "AuthenticationError",
    "RateLimitError",
    "APIConnectionError",
    "APITimeoutError",
    "GitError",
    "CommentError",
    # types
    "Revision",
    "BranchRevision",
    "HashRevision",
    "ContentRevision",
    "Build",
    "BuildTarget",
    "BuildStep",
    "Branch",
    "DocumentedSpec",
    "Outcome",
    "Outcomes",
    "Commit",
    "RepoRef",
    "MergeConflictPR",
]
