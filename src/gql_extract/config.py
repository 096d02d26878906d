import os
from dataclasses import dataclass

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def _env_flag(name: str) -> bool | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class ExtractorSettings:
    package_name: str = "gatsby"
    tag_name: str = "graphql"
    hook_name: str = "useStaticQuery"
    element_name: str = "StaticQuery"
    # Scanning <StaticQuery query={...}> elements; framework major 5 dropped them.
    static_query_elements: bool = True
    max_concurrency: int = 32
    # Code frames are highlighted unless FORCE_COLOR is "0".
    highlight_code_frames: bool = True

    @classmethod
    def from_env(cls) -> "ExtractorSettings":
        static_query_elements = _env_flag("GQL_EXTRACT_STATIC_QUERY_ELEMENTS")
        if static_query_elements is None:
            static_query_elements = os.getenv("GATSBY_MAJOR", "").strip() != "5"
        return cls(
            package_name=os.getenv("GQL_EXTRACT_PACKAGE", cls.package_name),
            tag_name=os.getenv("GQL_EXTRACT_TAG", cls.tag_name),
            hook_name=os.getenv("GQL_EXTRACT_HOOK", cls.hook_name),
            element_name=os.getenv("GQL_EXTRACT_ELEMENT", cls.element_name),
            static_query_elements=static_query_elements,
            max_concurrency=max(1, int(os.getenv("GQL_EXTRACT_CONCURRENCY", str(cls.max_concurrency)))),
            highlight_code_frames=os.getenv("FORCE_COLOR") != "0",
        )
