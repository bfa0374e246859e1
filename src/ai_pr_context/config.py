"""
Configuration Management

시스템 설정 관리
"""

import os
import yaml
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
from pathlib import Path
import logging

from .languages.registry import LANGUAGE_PROFILES


DEFAULT_LANGUAGES = ["python", "javascript", "typescript", "tsx"]


@dataclass
class ContextConfig:
    """컨텍스트 추출 설정"""
    scope_search_margin: int = 50
    lines_above: int = 5
    lines_below: int = 5
    max_workers: int = 4
    chars_per_token: int = 4  # 토큰 추정용 평균 문자 수


@dataclass
class ParserConfig:
    """언어 파서 설정"""
    enabled_languages: List[str] = field(default_factory=lambda: list(DEFAULT_LANGUAGES))


@dataclass
class LoggingConfig:
    """로깅 설정"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


def _parse_languages(value: str) -> List[str]:
    return [lang.strip().lower() for lang in value.split(',') if lang.strip()]


@dataclass
class AppConfig:
    """전체 애플리케이션 설정"""
    context: ContextConfig = field(default_factory=ContextConfig)
    parsers: ParserConfig = field(default_factory=ParserConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    debug: bool = False

    @classmethod
    def from_env(cls) -> "AppConfig":
        """환경 변수에서 설정 로드"""
        return cls(
            context=ContextConfig(
                scope_search_margin=int(os.getenv("SCOPE_SEARCH_MARGIN", "50")),
                lines_above=int(os.getenv("CONTEXT_LINES_ABOVE", "5")),
                lines_below=int(os.getenv("CONTEXT_LINES_BELOW", "5")),
                max_workers=int(os.getenv("CONTEXT_MAX_WORKERS", "4")),
                chars_per_token=int(os.getenv("CHARS_PER_TOKEN", "4")),
            ),
            parsers=ParserConfig(
                enabled_languages=_parse_languages(
                    os.getenv("ENABLED_LANGUAGES", ",".join(DEFAULT_LANGUAGES))
                ),
            ),
            logging=LoggingConfig(
                level=os.getenv("LOG_LEVEL", "INFO"),
                format=os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
                file_path=os.getenv("LOG_FILE"),
                max_file_size=int(os.getenv("LOG_MAX_SIZE", str(10 * 1024 * 1024))),
                backup_count=int(os.getenv("LOG_BACKUP_COUNT", "5")),
            ),
            debug=os.getenv("DEBUG", "false").lower() == "true",
        )

    @classmethod
    def from_yaml(cls, config_path: str) -> "AppConfig":
        """YAML 파일에서 설정 로드"""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        return cls(
            context=ContextConfig(**config_data.get('context', {})),
            parsers=ParserConfig(**config_data.get('parsers', {})),
            logging=LoggingConfig(**config_data.get('logging', {})),
            debug=config_data.get('debug', False),
        )

    def validate(self) -> None:
        """설정 유효성 검사"""
        errors = []

        # 마진 검증
        if self.context.scope_search_margin < 0:
            errors.append("Scope search margin must be non-negative")
        if self.context.lines_above < 0 or self.context.lines_below < 0:
            errors.append("Context line margins must be non-negative")

        # 워커 수 검증
        if self.context.max_workers <= 0:
            errors.append("Max workers must be positive")

        if self.context.chars_per_token <= 0:
            errors.append("Characters per token must be positive")

        # 언어 검증
        unknown = [lang for lang in self.parsers.enabled_languages if lang not in LANGUAGE_PROFILES]
        if unknown:
            errors.append(f"Unknown languages: {', '.join(unknown)}")

        # 로그 레벨 검증
        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.logging.level.upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.logging.level}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

    def to_dict(self) -> Dict[str, Any]:
        """설정을 딕셔너리로 변환"""
        return {
            'context': {
                'scope_search_margin': self.context.scope_search_margin,
                'lines_above': self.context.lines_above,
                'lines_below': self.context.lines_below,
                'max_workers': self.context.max_workers,
                'chars_per_token': self.context.chars_per_token,
            },
            'parsers': {
                'enabled_languages': list(self.parsers.enabled_languages),
            },
            'logging': {
                'level': self.logging.level,
                'format': self.logging.format,
                'file_path': self.logging.file_path,
                'max_file_size': self.logging.max_file_size,
                'backup_count': self.logging.backup_count,
            },
            'debug': self.debug,
        }


class ConfigManager:
    """설정 관리자"""

    def __init__(self, config: Optional[AppConfig] = None):
        self._config = config or AppConfig.from_env()
        self._config.validate()
        self._setup_logging()

    @property
    def config(self) -> AppConfig:
        """현재 설정 반환"""
        return self._config

    def update_config(self, **kwargs) -> None:
        """설정 업데이트"""
        config_dict = self._config.to_dict()

        for key, value in kwargs.items():
            if '.' in key:
                # 중첩된 설정 (예: 'context.lines_above')
                section, field_name = key.split('.', 1)
                if section not in config_dict or not isinstance(config_dict[section], dict):
                    raise KeyError(f"Unknown config section: {section}")
                config_dict[section][field_name] = value
            else:
                # 최상위 설정
                config_dict[key] = value

        # 새로운 설정 객체 생성
        new_config = AppConfig(
            context=ContextConfig(**config_dict['context']),
            parsers=ParserConfig(**config_dict['parsers']),
            logging=LoggingConfig(**config_dict['logging']),
            debug=config_dict['debug'],
        )

        new_config.validate()
        self._config = new_config
        self._setup_logging()

    def _setup_logging(self) -> None:
        """로깅 설정"""
        level = logging.DEBUG if self._config.debug else getattr(logging, self._config.logging.level.upper())
        logging.basicConfig(
            level=level,
            format=self._config.logging.format,
        )
        logging.getLogger("ai_pr_context").setLevel(level)

        # 파일 로깅이 설정된 경우 로테이션 설정
        if self._config.logging.file_path:
            from logging.handlers import RotatingFileHandler

            root_logger = logging.getLogger()
            already_attached = any(
                isinstance(h, RotatingFileHandler)
                and getattr(h, 'baseFilename', None) == os.path.abspath(self._config.logging.file_path)
                for h in root_logger.handlers
            )
            if already_attached:
                return

            handler = RotatingFileHandler(
                self._config.logging.file_path,
                maxBytes=self._config.logging.max_file_size,
                backupCount=self._config.logging.backup_count,
            )
            handler.setFormatter(logging.Formatter(self._config.logging.format))

            # 루트 로거에 핸들러 추가
            root_logger.addHandler(handler)


# 전역 설정 관리자 인스턴스 (첫 사용 시 생성)
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """전역 설정 관리자 반환"""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> AppConfig:
    """현재 설정 반환"""
    return get_config_manager().config


def update_config(**kwargs) -> None:
    """설정 업데이트"""
    get_config_manager().update_config(**kwargs)
