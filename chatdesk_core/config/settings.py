"""配置管理模块。

配置来源（优先级从高到低）：
1. 配置文件（显式路径、CHATDESK_CONFIG_FILE，或当前目录下的
   chatdesk.conf.secret.json / config.yaml；JSON 也由 YAML 解析器读取）。
2. 环境变量（前缀 CHATDESK_）。
3. .env 文件。
4. 字段默认值。

配置加载失败统一抛出 ConfigurationError，由启动入口处理为致命错误。
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, ValidationError as PydanticValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chatdesk_core.domain.exceptions import ConfigurationError
from chatdesk_core.providers.registry import PROVIDER_REGISTRY

CONFIG_FILE_ENV = "CHATDESK_CONFIG_FILE"
SECRET_FILE_NAME = "chatdesk.conf.secret.json"
YAML_FILE_NAME = "config.yaml"


class Settings(BaseSettings):
    """应用配置（加载后不可变）。"""

    # ---- Provider 相关配置 ----
    provider: str = Field(
        default="openai",
        description="Provider 名称，决定默认 base_url 与模型，例如 openai、kimi、glm",
    )
    api_key: str = Field(description="模型服务 API 密钥")
    base_url: Optional[str] = Field(default=None, description="覆盖 Provider 默认的 API 基础URL")
    model: Optional[str] = Field(default=None, description="覆盖 Provider 默认模型")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="生成温度")
    max_tokens: Optional[int] = Field(default=None, ge=1, description="单次回复最大 token 数")
    http_timeout: float = Field(default=30.0, ge=1.0, description="HTTP 超时时间（秒）")
    system_prompt: Optional[str] = Field(default=None, description="会话对话使用的系统提示词")

    # ---- 会话/命令 ----
    default_title: str = Field(default="", description="新会话的默认标题")
    greeting_template: str = Field(default="Hello from {name}!", description="greet 命令的提示词模板")
    worker_threads: int = Field(default=4, ge=1, le=32, description="命令线程池大小")

    # ---- 存储与日志 ----
    storage_root: str = Field(default=".storage", description="窗口状态等本地文件的存储目录")
    log_dir: str = Field(default="logs", description="日志目录")
    log_level: str = Field(default="INFO", description="日志级别")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_prefix="CHATDESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 10:
            raise ValueError("API key seems too short")
        return v

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        key = v.strip().lower()
        if key not in PROVIDER_REGISTRY:
            raise ValueError(f"Unknown provider: {v!r} (expected one of {sorted(PROVIDER_REGISTRY)})")
        return key

    @field_validator("greeting_template")
    @classmethod
    def validate_greeting_template(cls, v: str) -> str:
        if "{name}" not in v:
            raise ValueError("greeting_template must contain a {name} placeholder")
        try:
            v.format(name="x")
        except (KeyError, IndexError, AttributeError, ValueError) as exc:
            raise ValueError(f"greeting_template must only use the {{name}} placeholder: {exc!r}") from None
        return v

    def create_client(self):
        """按当前配置创建一个新的模型客户端实例。"""

        from chatdesk_core.providers import create_provider

        return create_provider(self)


def find_config_file(explicit: str | Path | None = None) -> Optional[Path]:
    """定位配置文件。显式指定（参数或环境变量）但不存在时报错。"""

    named = explicit or os.getenv(CONFIG_FILE_ENV)
    if named:
        path = Path(named).expanduser()
        if not path.is_file():
            raise ConfigurationError(code="CONFIG_ERROR", message=f"Config file not found: {path}")
        return path
    for name in (SECRET_FILE_NAME, YAML_FILE_NAME):
        path = Path.cwd() / name
        if path.is_file():
            return path
    return None


def read_config_file(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(code="CONFIG_ERROR", message=f"Failed to read config file {path}: {exc}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(code="CONFIG_ERROR", message=f"Config file {path} is not a mapping")
    return data


def load_settings(config_file: str | Path | None = None) -> Settings:
    """加载并校验配置；任何失败都以 ConfigurationError 抛出。"""

    path = find_config_file(config_file)
    data = read_config_file(path) if path else {}
    try:
        return Settings(**data)
    except PydanticValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigurationError(
            code="CONFIG_ERROR",
            message=f"Invalid configuration: {problems}",
            config_file=str(path) if path else None,
        )
