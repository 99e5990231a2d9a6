"""Helpers for the RTDE handshake: recipes, variable type checks and frequencies."""

from __future__ import annotations

import os
from typing import Iterable

from .serialization import RTDEError
from .version import VersionInformation

UR_RTDE_PORT = 30004
PIPELINE_NAME = "RTDE Data Pipeline"
MAX_RTDE_PROTOCOL_VERSION = 2
MAX_REQUEST_RETRIES = 5
MAX_INITIALIZE_ATTEMPTS = 10
CB3_MAX_FREQUENCY = 125.0
URE_MAX_FREQUENCY = 500.0

TIMESTAMP = "timestamp"
_NOT_FOUND = "NOT_FOUND"
_IN_USE = "IN_USE"


def read_recipe(recipe_file: str | os.PathLike[str]) -> list[str]:
    """Read a recipe file, one variable name per line."""
    try:
        with open(recipe_file, encoding="utf-8") as handle:
            return [line.rstrip("\n") for line in handle]
    except OSError as exc:
        raise RTDEError(
            f"Opening file '{os.fspath(recipe_file)}' failed with error: {exc.strerror or exc}"
        ) from exc


def split_variable_types(variable_types: str) -> list[str]:
    """Split a comma separated list of variable types as reported by the robot."""
    if not variable_types:
        return []
    parts = variable_types.split(",")
    if parts[-1] == "":
        parts.pop()
    return parts


def ensure_timestamp(recipe: Iterable[str]) -> list[str]:
    """Return the recipe with ``timestamp`` appended if it is not already in it."""
    names = list(recipe)
    if TIMESTAMP not in names:
        names.append(TIMESTAMP)
    return names


def _check_types(recipe: Iterable[str], variable_types: str, direction: str) -> list[str]:
    names = list(recipe)
    types = split_variable_types(variable_types)
    if len(names) != len(types):
        raise RTDEError(
            f"Robot confirmed {len(types)} {direction} variable types for a recipe "
            f"of {len(names)} variables"
        )
    for name, type_name in zip(names, types):
        if type_name == _NOT_FOUND:
            raise RTDEError(
                f"Variable '{name}' not recognized by the robot. "
                f"Probably your {direction} recipe contains errors"
            )
    return types


def check_output_types(recipe: Iterable[str], variable_types: str) -> list[str]:
    """Check the robot's answer to an output recipe and return the confirmed types."""
    return _check_types(recipe, variable_types, "output")


def check_input_types(recipe: Iterable[str], variable_types: str) -> list[str]:
    """Check the robot's answer to an input recipe and return the confirmed types.

    Besides unknown variables, variables controlled by another client are refused.
    """
    names = list(recipe)
    types = _check_types(names, variable_types, "input")
    for name, type_name in zip(names, types):
        if type_name == _IN_USE:
            raise RTDEError(
                f"Variable '{name}' is currently controlled by another RTDE client. "
                "The input recipe can't be used as configured"
            )
    return types


def max_frequency_for(version: VersionInformation) -> float:
    """The highest data rate a controller of the given version can publish at."""
    return CB3_MAX_FREQUENCY if version.major < 5 else URE_MAX_FREQUENCY


def resolve_target_frequency(target_frequency: float, max_frequency: float) -> float:
    """Return the frequency to use; zero selects the maximum frequency."""
    if target_frequency == 0:
        return max_frequency
    if target_frequency <= 0.0 or target_frequency > max_frequency:
        raise RTDEError("Invalid target frequency of RTDE connection")
    return target_frequency