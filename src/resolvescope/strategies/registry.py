import importlib
import inspect
import logging
import pkgutil
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Type

from .base import AddressStrategy, LookupFailure, ResolutionStrategy

logger = logging.getLogger(__name__)


def _normalize(alias: str) -> str:
    return alias.strip().lower().replace("-", "_")


def _iter_strategy_modules(
    package_name: str = "resolvescope.strategies",
) -> Iterable[str]:
    pkg = importlib.import_module(package_name)
    for modinfo in pkgutil.walk_packages(pkg.__path__, pkg.__name__ + "."):
        yield modinfo.name


def discover_strategies(
    package_name: str = "resolvescope.strategies",
) -> Dict[str, Type[AddressStrategy]]:
    """
    Discover and register strategy classes by importing modules.

    Inputs:
      - package_name (str): Package path to scan for strategies

    Outputs:
      - Dict[str, Type[AddressStrategy]]: Mapping from normalized aliases to
        strategy classes. Each class is also registered under its
        ResolutionStrategy value.

    Raises ImportError if module import fails. Raises ValueError on duplicate aliases.

    Example:
        >>> registry = discover_strategies()
        >>> registry["isp"].strategy
        <ResolutionStrategy.SYSTEM: 'system'>
    """
    registry: Dict[str, Type[AddressStrategy]] = {}

    for modname in _iter_strategy_modules(package_name):
        try:
            module = importlib.import_module(modname)
        except ImportError:
            logger.error("Failed importing strategy module %s", modname)
            raise

        for _, obj in inspect.getmembers(module, inspect.isclass):
            if not issubclass(obj, AddressStrategy) or obj is AddressStrategy:
                continue
            # Intermediate bases such as DoHJsonStrategy serve no strategy.
            if "strategy" not in vars(obj):
                continue

            claimed = set(_normalize(a) for a in (getattr(obj, "aliases", ()) or ()))
            claimed.add(_normalize(obj.strategy.value))

            for alias in claimed:
                if alias in registry and registry[alias] is not obj:
                    other = registry[alias]
                    raise ValueError(
                        f"Duplicate strategy alias '{alias}' claimed by {obj.__module__}.{obj.__name__} "
                        f"and {other.__module__}.{other.__name__}"
                    )
                registry[alias] = obj

    return registry


def _validate_strategy_config(
    strategy_cls: Type[AddressStrategy], config: Optional[Mapping[str, Any]]
) -> Dict[str, Any]:
    """Brief: Validate strategy config through the class's pydantic model.

    Inputs:
      - strategy_cls: AddressStrategy subclass.
      - config: Raw mapping from YAML (may be None).

    Outputs:
      - dict: Validated mapping with unset optional fields dropped.

    Raises:
      - ValueError when the model rejects the mapping.
    """

    cfg = dict(config or {})
    model_cls = strategy_cls.get_config_model()
    if model_cls is None:
        return cfg
    try:
        model_instance = model_cls(**cfg)
    except Exception as exc:
        raise ValueError(
            f"Invalid configuration for strategy {strategy_cls.__name__}: {exc}"
        ) from exc
    return dict(model_instance.model_dump(exclude_none=True))


def build_strategies(
    upstream_cfg: Optional[Mapping[str, Any]] = None,
    registry: Optional[Dict[str, Type[AddressStrategy]]] = None,
) -> Dict[ResolutionStrategy, AddressStrategy]:
    """Brief: Instantiate one strategy per ResolutionStrategy member.

    Inputs:
      - upstream_cfg: The ``upstream`` config section. A top-level
        ``timeout_ms`` is used by every strategy that does not set its own;
        per-strategy sections are keyed by strategy value ("system",
        "google", "cloudflare").
      - registry: Optional alias registry from discover_strategies().

    Outputs:
      - Dict mapping each ResolutionStrategy to a configured instance.

    Example:
      >>> strategies = build_strategies({"timeout_ms": 2000})
      >>> sorted(s.value for s in strategies)
      ['cloudflare', 'google', 'system']
    """

    cfg = dict(upstream_cfg or {})
    reg = registry or discover_strategies()
    shared_timeout = cfg.get("timeout_ms")

    strategies: Dict[ResolutionStrategy, AddressStrategy] = {}
    for member in ResolutionStrategy:
        strategy_cls = reg.get(member.value)
        if strategy_cls is None:
            raise KeyError(f"No strategy implementation registered for '{member.value}'")
        section = dict(cfg.get(member.value) or {})
        if shared_timeout is not None:
            section.setdefault("timeout_ms", shared_timeout)
        validated = _validate_strategy_config(strategy_cls, section)
        strategies[member] = strategy_cls(**validated)
    return strategies


def resolve_address(
    host: str,
    strategy: ResolutionStrategy,
    strategies: Optional[Mapping[ResolutionStrategy, AddressStrategy]] = None,
) -> Tuple[str, Optional[LookupFailure]]:
    """Brief: Resolve host through one strategy without raising.

    Inputs:
      - host: Normalized hostname.
      - strategy: Which upstream to use.
      - strategies: Configured instances; defaults from build_strategies().

    Outputs:
      - (ip_address, None) on success, ("", LookupFailure) otherwise.
    """

    impls = strategies if strategies is not None else build_strategies()
    impl = impls[strategy]
    try:
        return impl.lookup(host), None
    except LookupFailure as exc:
        return "", exc
    except Exception as exc:
        logger.exception("Strategy %s raised while resolving %s", strategy.value, host)
        return "", impl.failure_class(f"Lookup failed: {exc}")
