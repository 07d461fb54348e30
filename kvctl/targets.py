"""
Target validation and namespace binding resolution.

Both checks are local and cheap, so commands run them before touching the
network or prompting the user.
"""

from kvctl.exceptions import BindingNotFoundError, ConfigurationError, DuplicateBindingError


def validate_target(target):
    """Raise ConfigurationError listing every required field the target lacks."""
    missing_fields = []

    if not target.account_id:
        missing_fields.append("account_id")

    if missing_fields:
        raise ConfigurationError(
            f"[SETUP_NEEDED] Your kvctl.toml is missing the following field(s): {missing_fields}",
            missing_fields,
        )


def _find_duplicate_binding(target):
    """Return the first binding name that repeats, or None."""
    seen = set()
    for namespace in target.kv_namespaces or ():
        if namespace.binding in seen:
            return namespace.binding
        seen.add(namespace.binding)
    return None


def get_namespace_id(target, binding):
    """Return the remote namespace id configured for *binding*.

    Duplicate binding names anywhere in the target are an error even when
    *binding* is not one of them; an ambiguous target never resolves.
    """
    duplicate = _find_duplicate_binding(target)
    if duplicate is not None:
        raise DuplicateBindingError(duplicate, target.name)

    for namespace in target.kv_namespaces or ():
        if namespace.binding == binding:
            return namespace.id

    raise BindingNotFoundError(binding, target.name)
