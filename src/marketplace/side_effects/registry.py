"""Side-effect handler registry.

The web app and the engine use the inline handler; tests swap in the fake.
"""

from marketplace.side_effects.port import SideEffectPort

_handler: SideEffectPort | None = None


def get_side_effect_handler() -> SideEffectPort:
    global _handler
    if _handler is None:
        from marketplace.side_effects.inline import InlineSideEffectHandler

        _handler = InlineSideEffectHandler()
    return _handler


def set_side_effect_handler(handler: SideEffectPort) -> None:
    global _handler
    _handler = handler


def reset_side_effect_handler() -> None:
    global _handler
    _handler = None
