import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


def is_docker_environment() -> bool:
    """检测是否在Docker容器中运行"""
    # 方法1: 检查 /.dockerenv 文件（Docker标准做法）
    if Path("/.dockerenv").exists():
        return True
    # 方法2: 检查环境变量
    if os.getenv("DOCKER_CONTAINER") == "true" or os.getenv("IN_DOCKER") == "true":
        return True
    # 方法3: 检查当前工作目录是否为 /app
    return Path.cwd() == Path("/app")


def get_config_dir() -> Path:
    return Path("/app/config") if is_docker_environment() else Path("config")


# 1. 为配置的不同部分创建 Pydantic 模型，提供类型提示和默认值
class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 7768


class LogConfig(BaseModel):
    level: str = "INFO"
    # 为空时使用 <配置目录>/logs
    directory: Optional[str] = None


class BangumiConfig(BaseModel):
    api_base_url: str = "https://api.bgm.tv"
    # 个人访问令牌，可选
    token: str = ""
    user_agent: str = "BangumiMatcher/1.0 (https://github.com/bangumi/matcher)"
    timeout: float = 20.0
    # 分集列表每页条数
    page_size: int = 100


class ResolverConfig(BaseModel):
    """分集识别开关。同时接受插件原有的驼峰命名。"""
    model_config = ConfigDict(populate_by_name=True)

    # 总是使用文件名中的集数
    always_replace_episode_number: bool = Field(default=False, alias="alwaysReplaceEpisodeNumber")
    # 信任已有的 Bangumi 分集ID
    trust_existed_bangumi_id: bool = Field(default=False, alias="trustExistedBangumiId")
    # 优先使用第三方解析器提取集数
    always_get_episode_by_anitomy_sharp: bool = Field(default=False, alias="alwaysGetEpisodeByAnitomySharp")


class LibraryContainerConfig(BaseModel):
    path: str
    kind: str = "season"            # season / series
    id: Optional[str] = None        # 为空时使用 path
    index_number: Optional[int] = None
    bangumi_id: Optional[str] = None


class LibraryConfig(BaseModel):
    containers: List[LibraryContainerConfig] = []


# 2. 创建一个自定义的配置源，用于从 YAML 文件加载设置
class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    def __init__(self, settings_cls: type[BaseSettings]):
        super().__init__(settings_cls)
        # 可通过 BANGUMI_MATCHER_CONFIG_FILE 指定配置文件
        override = os.getenv("BANGUMI_MATCHER_CONFIG_FILE")
        self.yaml_file = Path(override) if override else get_config_dir() / "config.yml"

    def get_field_value(self, field, field_name):
        return None, None, False

    def __call__(self) -> Dict[str, Any]:
        if not self.yaml_file.is_file():
            return {}
        with open(self.yaml_file, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}


# 3. 定义主设置类，它将聚合所有配置
class Settings(BaseSettings):
    # 例如，在容器中设置环境变量 BANGUMI_MATCHER_RESOLVER__TRUST_EXISTED_BANGUMI_ID=true
    model_config = SettingsConfigDict(
        env_prefix="BANGUMI_MATCHER_",
        case_sensitive=False,
        env_nested_delimiter="__",
    )

    log: LogConfig = LogConfig()
    server: ServerConfig = ServerConfig()
    bangumi: BangumiConfig = BangumiConfig()
    resolver: ResolverConfig = ResolverConfig()
    library: LibraryConfig = LibraryConfig()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # 定义加载源的优先级:
        # 1. 初始化参数 (测试中使用)
        # 2. 环境变量
        # 3. .env 文件
        # 4. YAML 文件
        # 5. 文件密钥
        # 6. Pydantic 模型中的默认值 (最低)
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


settings = Settings()
