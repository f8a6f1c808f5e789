"""
Environment resolver.

Maps a deployment target (prod, dev or a configured extra) and optional
explicit overrides to the remote location of the sibling file. No I/O.
"""

from services.errors import InvalidTargetError, MissingProjectError
from services.models import Location, Overrides


def normalize_target(target):
    """Lower-case and strip a target name, rejecting empty names."""
    name = (target or "").strip().lower()
    if not name:
        raise InvalidTargetError("target must not be empty")
    return name


def resolve(target, overrides=None, targets=None, default_project=None):
    """
    Resolve a target to the location of its sibling file.

    Args:
        target: Target name, e.g. "prod" or "dev".
        overrides: Optional Overrides; when project, bucket and key are all
            set they are used verbatim and the target table is not consulted.
        targets: Mapping of target name to (bucket, key). Defaults to the
            configured table.
        default_project: Project used when no override supplies one.

    Returns:
        Location for the target.

    Raises:
        InvalidTargetError: For partial overrides or unknown targets.
        MissingProjectError: When no project is available.
    """
    overrides = overrides or Overrides()

    if overrides.is_complete():
        return Location(overrides.project, overrides.bucket, overrides.key)

    if not overrides.is_empty():
        raise InvalidTargetError(
            "--project, --bucket and --key must be given together"
        )

    if targets is None:
        from config.settings import get_targets
        targets = get_targets()

    name = normalize_target(target)
    if name not in targets:
        allowed = " | ".join(sorted(targets))
        raise InvalidTargetError(f"Invalid target {target!r}. Allowed [{allowed}]")

    if not default_project:
        raise MissingProjectError(
            "no project configured, set X_PROJECT or pass a full override"
        )

    bucket, key = targets[name]
    return Location(default_project, bucket, key)
