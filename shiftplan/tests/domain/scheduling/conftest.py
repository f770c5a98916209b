from .fixtures import (  # noqa: F401
    machine,
    night_machine,
    no_holidays,
    order,
    product,
    shift,
)
