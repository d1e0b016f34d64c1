"""
Configuration for building a FortuneDB
Loads settings from dicts, YAML text or compact version strings
"""

import logging
import re
from dataclasses import dataclass, fields
from typing import Dict, Optional
import yaml

from .core import DEFAULT_DELIMITER, ConfigError, EmptySegments, TrimPolicy
from .parser import CorpusParser
from .query import SourceMatcher, match_all, prefix_matcher, regex_matcher


logger = logging.getLogger(__name__)


@dataclass
class FortuneConfig:
    """Parser policies, random seed and source filter for one corpus"""
    delimiter: str = DEFAULT_DELIMITER
    trim: TrimPolicy = TrimPolicy.TRAILING_NEWLINE
    empty_segments: EmptySegments = EmptySegments.KEEP
    seed: Optional[int] = None
    prefixes: Optional[str] = None
    regex: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'FortuneConfig':
        """
        Build from a plain mapping.
        Enum fields accept the member name ('keep', 'skip', 'none', ...)
        or its numeric code.
        """
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {unknown}")

        if 'trim' in data:
            data['trim'] = _enum_value(TrimPolicy, data['trim'], 'trim')
        if 'empty_segments' in data:
            data['empty_segments'] = _enum_value(
                EmptySegments, data['empty_segments'], 'empty_segments'
            )

        delimiter = data.get('delimiter', DEFAULT_DELIMITER)
        if not isinstance(delimiter, str) or not delimiter:
            raise ConfigError("delimiter must be a non-empty string")

        seed = data.get('seed')
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            raise ConfigError(f"seed must be an integer, got {seed!r}")

        for key in ('prefixes', 'regex'):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise ConfigError(f"{key} must be a string, got {value!r}")
        if data.get('regex') is not None:
            try:
                re.compile(data['regex'])
            except re.error as e:
                raise ConfigError(f"Invalid regex {data['regex']!r}: {e}") from e

        return cls(**data)

    @classmethod
    def from_yaml(cls, text: str) -> 'FortuneConfig':
        """Build from YAML text, e.g. the contents of a fortunes.yaml"""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML configuration: {e}") from e
        if data is not None and not isinstance(data, dict):
            raise ConfigError("YAML configuration must be a mapping")
        return cls.from_dict(data)

    @classmethod
    def from_version(cls, version: str) -> 'FortuneConfig':
        """
        Parse a version string: FortuneDB-v1.et
        e = EmptySegments (1=KEEP, 2=SKIP)
        t = TrimPolicy (1=TRAILING_NEWLINE, 2=NONE)
        """
        match = re.search(r'v1\.(\d)(\d)$', version)
        if not match:
            raise ConfigError(f"Invalid version string: {version}")

        e, t = match.groups()
        return cls(
            empty_segments=_enum_value(EmptySegments, int(e), 'empty_segments'),
            trim=_enum_value(TrimPolicy, int(t), 'trim'),
        )

    def make_parser(self) -> CorpusParser:
        return CorpusParser(
            delimiter=self.delimiter,
            trim=self.trim,
            empty_segments=self.empty_segments,
        )

    def matcher(self) -> SourceMatcher:
        """Source filter; prefixes win when both filters are set"""
        if self.prefixes is not None and self.regex is not None:
            logger.warning(
                "Both 'prefixes' and 'regex' are set. Using prefixes."
            )
        if self.prefixes is not None:
            return prefix_matcher(self.prefixes)
        if self.regex is not None:
            return regex_matcher(self.regex)
        return match_all


def _enum_value(enum_cls, value, key: str):
    if isinstance(value, enum_cls):
        return value
    try:
        if isinstance(value, str):
            return enum_cls[value.strip().upper()]
        return enum_cls(value)
    except (KeyError, ValueError) as e:
        choices = [m.name.lower() for m in enum_cls]
        raise ConfigError(
            f"Invalid {key}: {value!r}. Expected one of {choices}"
        ) from e
