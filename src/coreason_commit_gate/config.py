# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_commit_gate

"""
Configuration management for the Commit Gate.
"""

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application configuration using environment variables.

    Commands are argv lists. From the environment they are given as JSON,
    e.g. COMMIT_GATE_LINT_COMMAND='["ruff", "check", "."]'.
    """

    model_config = SettingsConfigDict(
        env_prefix="COMMIT_GATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Pre-commit pipeline, in execution order
    staged_files_command: List[str] = Field(
        default=["npx", "--no", "--", "lint-staged"],
        description="Auto-fixing linter/formatter run on staged files only.",
    )
    staged_files_pass_files: bool = Field(
        default=False,
        description="Append the staged file paths to staged_files_command, for fixers that take files as arguments.",
    )
    format_command: List[str] = Field(
        default=["npx", "--no", "--", "prettier", "--check", "."],
        description="Whole-project formatter check.",
    )
    format_fix_command: Optional[List[str]] = Field(
        default=["npx", "prettier", "--write", "."],
        description="Command suggested to the operator when the format check fails.",
    )
    lint_command: List[str] = Field(
        default=["npx", "--no", "--", "eslint", "."],
        description="Whole-project linter.",
    )
    lint_fix_command: Optional[List[str]] = Field(
        default=["npx", "eslint", ".", "--fix"],
        description="Command suggested to the operator when lint fails.",
    )
    type_check_command: List[str] = Field(
        default=["npx", "--no", "--", "tsc", "--noEmit"],
        description="Type checker in no-emit mode.",
    )

    # Commit-msg stage. None selects the built-in conventional commit validator.
    commit_msg_command: Optional[List[str]] = Field(
        default=None,
        description="External validator; the message file path is appended as the last argument.",
    )
    header_max_length: int = Field(default=100, ge=1, description="Maximum length of the commit header line.")

    # Tunable Settings
    restage_fixes: bool = Field(
        default=True, description="Re-add staged files modified by the staged-files fixup step."
    )
    step_timeout: Optional[float] = Field(
        default=None, gt=0, description="Per-step timeout in seconds. None waits indefinitely."
    )
    bypass: bool = Field(default=False, description="Skip every check. Use only in emergencies.")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING", description="Minimum level printed to stderr."
    )
    log_file: bool = Field(default=True, description="Write an audit log inside the git directory.")

    @field_validator("staged_files_command", "format_command", "lint_command", "type_check_command")
    @classmethod
    def validate_command(cls, v: List[str], info: object) -> List[str]:
        """
        Validate that pipeline commands name an executable.
        """
        if not v or not v[0].strip():
            field_name = "unknown"
            if hasattr(info, "field_name"):
                field_name = info.field_name
            raise ValueError(f"{field_name} must be a non-empty command.")
        return v

    @field_validator("commit_msg_command", "format_fix_command", "lint_fix_command")
    @classmethod
    def validate_optional_command(cls, v: Optional[List[str]], info: object) -> Optional[List[str]]:
        if v is not None and (not v or not v[0].strip()):
            field_name = "unknown"
            if hasattr(info, "field_name"):
                field_name = info.field_name
            raise ValueError(f"{field_name} must be a non-empty command or null.")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Returns a cached instance of the Settings class.
    """
    return Settings()
