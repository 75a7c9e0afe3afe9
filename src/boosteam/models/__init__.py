def import_all_models() -> None:
    """Register every mapped class on ``Base.metadata`` before create_all()."""
    from boosteam.models import roster  # noqa: F401
    from boosteam.security.auth import models as _auth_models  # noqa: F401
    from boosteam.security.rbac import models as _rbac_models  # noqa: F401
