"""Data models for flowcheck test definitions."""

from typing import Annotated, Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

SelectorState = Literal["visible", "hidden", "attached", "detached"]


class _FrozenModel(BaseModel):
    """Immutable model that accepts camelCase keys from YAML."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ToleranceConfig(_FrozenModel):
    """Per-test policy describing which runtime signals are expected."""

    # Category toggles: a true value ignores the whole category
    http_errors: bool = False
    console_errors: bool = False
    page_errors: bool = False
    request_failures: bool = False

    # Content allowlists (http and console categories only)
    http_status_allowlist: tuple[int, ...] = ()
    http_url_allowlist: tuple[str, ...] = ()
    console_pattern_allowlist: tuple[str, ...] = ()


class NavigateStep(_FrozenModel):
    action: Literal["navigate"]
    url: str | None = None
    path: str | None = None


class ClickStep(_FrozenModel):
    action: Literal["click"]
    selector: str


class TypeStep(_FrozenModel):
    action: Literal["type"]
    selector: str
    text: str
    press_enter: bool = False


class FillStep(_FrozenModel):
    action: Literal["fill"]
    selector: str
    text: str


class WaitForSelectorStep(_FrozenModel):
    action: Literal["waitForSelector"]
    selector: str
    state: SelectorState = "visible"
    timeout_ms: int | None = None


class ExpectVisibleStep(_FrozenModel):
    action: Literal["expectVisible"]
    selector: str
    timeout_ms: int | None = None


class ExpectTextStep(_FrozenModel):
    action: Literal["expectText"]
    selector: str
    text: str
    timeout_ms: int | None = None


class WaitStep(_FrozenModel):
    action: Literal["wait"]
    ms: int = Field(gt=0)


class ScreenshotStep(_FrozenModel):
    action: Literal["screenshot"]
    name: str | None = None


Step = Annotated[
    NavigateStep
    | ClickStep
    | TypeStep
    | FillStep
    | WaitForSelectorStep
    | ExpectVisibleStep
    | ExpectTextStep
    | WaitStep
    | ScreenshotStep,
    Field(discriminator="action"),
]


class TestDefinition(_FrozenModel):
    """A named, ordered browser user flow plus its tolerance policy."""

    __test__ = False  # not a pytest test class

    name: str
    description: str | None = None
    base_url: str | None = None
    steps: tuple[Step, ...] = Field(min_length=1)
    tolerate: ToleranceConfig | None = None

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str | None) -> str | None:
        if value is None:
            return value
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"baseUrl must be an absolute http(s) URL, got {value!r}")
        return value
