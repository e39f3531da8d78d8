from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    PyprojectTomlConfigSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from branchcut.bump import DEFAULT_BUMP_COMMAND


def _snake_keys(value: Any) -> Any:  # noqa: ANN401
    if isinstance(value, dict):
        return {str(k).replace('-', '_'): _snake_keys(v) for k, v in value.items()}
    return value


class _KebabCasePyprojectSource(PyprojectTomlConfigSettingsSource):
    """`[tool.branchcut]` reader that accepts kebab-case keys."""

    def __call__(self) -> dict[str, Any]:
        return _snake_keys(super().__call__())


class BranchcutHooks(BaseModel):
    """External commands invoked by the workflows.

    Attributes:
        bump_version: argv of the version bump tool; `{level}` is replaced
            with the bump level.
    """

    bump_version: list[str] = Field(default_factory=lambda: list(DEFAULT_BUMP_COMMAND))


class BranchcutSettings(BaseSettings):
    """Layered configuration.

    Priority: explicit kwargs, `BRANCHCUT_*` environment variables,
    `branchcut.toml`, then `[tool.branchcut]` in `pyproject.toml`.
    """

    model_config = SettingsConfigDict(
        env_prefix='BRANCHCUT_',
        env_nested_delimiter='__',
        toml_file='branchcut.toml',
        pyproject_toml_table_header=('tool', 'branchcut'),
        extra='ignore',
    )

    upstream: str = 'origin'
    trunk_branch: str = 'master'
    manifest_path: str = 'package.json'
    hooks: BranchcutHooks = Field(default_factory=BranchcutHooks)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
            _KebabCasePyprojectSource(settings_cls),
        )
