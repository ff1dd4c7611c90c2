import json
import sys
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Mapping, Optional
import os

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT_URL = "https://www.focalrina.com/api/gemini"
ENDPOINT_ENV_VAR = "FOCALRINA_PROXY_API_URL"
DEFAULT_USER_AGENT = "FocalrinaDesktopBridge/1.0"
DEFAULT_TIMEOUT = 60.0
DEFAULT_MAX_REDIRECTS = 5


def get_app_data_dir():
    """Возвращает путь для хранения данных приложения"""
    if getattr(sys, 'frozen', False):
        # Собранное приложение: конфиги и логи храним в профиле пользователя
        if os.name == 'nt':  # Windows
            appdata_dir = Path(os.getenv('LOCALAPPDATA', Path.home() / 'AppData' / 'Local'))
            app_data_dir = appdata_dir / 'FocalrinaBridge'
        else:  # Linux/Mac
            app_data_dir = Path.home() / '.config' / 'focalrina_bridge'
    else:
        # Dev режим
        app_data_dir = Path(__file__).parent.parent / 'app_data'

    app_data_dir.mkdir(parents=True, exist_ok=True)
    return app_data_dir


@dataclass(frozen=True)
class BridgeConfig:
    """Settings passed explicitly into the bridge pipeline."""

    endpoint_url: str = DEFAULT_ENDPOINT_URL
    timeout: float = DEFAULT_TIMEOUT
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    user_agent: str = DEFAULT_USER_AGENT
    diagnostics_dir: Optional[Path] = None


class ConfigManager:
    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self._get_config_path()
        self.config = self._load_config()

    def _get_config_path(self) -> Path:
        """Возвращает путь к файлу конфигурации"""
        config_dir = get_app_data_dir()
        return config_dir / 'config.json'

    def _get_default_config(self) -> dict:
        """Возвращает конфигурацию по умолчанию"""
        return {
            'bridge': {
                'endpoint_url': DEFAULT_ENDPOINT_URL,
            },

            'ui': {
                'window_width': 720,
                'window_height': 640,
                'politeness': 0.5,
            }
        }

    def _load_config(self) -> Dict[str, Any]:
        """Загружает конфигурацию из файла"""
        default_config = self._get_default_config()

        try:
            if self.config_path.exists():
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    loaded_config = json.load(f)

                if isinstance(loaded_config, dict):
                    # Объединяем с дефолтными значениями
                    return self._deep_merge(default_config, loaded_config)

                logger.error(
                    f"Конфиг {self.config_path} должен быть JSON-объектом, "
                    f"получено: {type(loaded_config).__name__}"
                )
        except (OSError, ValueError) as e:
            logger.error(f"Ошибка загрузки конфига: {e}")

        return default_config

    def _deep_merge(self, base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
        """Рекурсивное объединение словарей"""
        result = base.copy()

        for key, value in update.items():
            if (key in result and
                    isinstance(result[key], dict) and
                    isinstance(value, dict)):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def save(self) -> bool:
        """Сохраняет конфигурацию в файл"""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self.config, f, indent=2, ensure_ascii=False)
            logger.info("Конфигурация сохранена")
            return True
        except OSError as e:
            logger.error(f"Ошибка сохранения конфига: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """Получает значение по ключу (dot notation)"""
        value = self.config

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any, save: bool = False) -> bool:
        """Устанавливает значение по ключу (dot notation)"""
        keys = key.split('.')
        config_ref = self.config

        for k in keys[:-1]:
            if k not in config_ref or not isinstance(config_ref[k], dict):
                config_ref[k] = {}
            config_ref = config_ref[k]

        config_ref[keys[-1]] = value

        if save:
            return self.save()
        return True


def resolve_bridge_config(environ: Optional[Mapping[str, str]] = None,
                          config: Optional[ConfigManager] = None) -> BridgeConfig:
    """
    Build the pipeline configuration at the process boundary.

    The environment variable wins over the config file, which wins over the
    built-in endpoint. Empty values are treated as unset.

    Args:
        environ: Environment mapping (defaults to os.environ)
        config: ConfigManager to read ``bridge.endpoint_url`` from

    Returns:
        BridgeConfig: Immutable settings for BridgePipeline
    """
    if environ is None:
        environ = os.environ

    endpoint_url = (environ.get(ENDPOINT_ENV_VAR) or '').strip()
    source = 'environment'

    if not endpoint_url and config is not None:
        configured = config.get('bridge.endpoint_url')
        endpoint_url = configured.strip() if isinstance(configured, str) else ''
        source = 'config file'

    if not endpoint_url:
        endpoint_url = DEFAULT_ENDPOINT_URL
        source = 'default'

    logger.info(f"🔗 Bridge endpoint: {endpoint_url} (from {source})")
    return BridgeConfig(endpoint_url=endpoint_url)


# Синглтон для глобального доступа
_config_instance = None


def get_config() -> ConfigManager:
    """Возвращает глобальный экземпляр ConfigManager"""
    global _config_instance
    if _config_instance is None:
        _config_instance = ConfigManager()
    return _config_instance
