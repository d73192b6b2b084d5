__all__ = ["describe_character", "validate_character"]


def __getattr__(name):
    if name in __all__:
        from . import rules_engine

        return getattr(rules_engine, name)
    raise AttributeError(name)
