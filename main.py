# main.py
import sys
import logging
from PySide6.QtWidgets import QApplication, QMessageBox


def setup_logging():
    """Настраивает логирование ДО всех операций с ротацией"""
    from core.config_manager import get_app_data_dir
    from logging.handlers import RotatingFileHandler

    app_data_dir = get_app_data_dir()
    logs_dir = app_data_dir / "logs"
    logs_dir.mkdir(exist_ok=True)

    log_file = logs_dir / "focalrina_bridge.log"

    # Ротирующий обработчик: макс 5MB, 5 резервных копий
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(
        logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    )

    logging.basicConfig(
        level=logging.INFO,
        handlers=[console_handler, file_handler]
    )


# НАСТРАИВАЕМ ЛОГИРОВАНИЕ САМЫМ ПЕРВЫМ ДЕЛОМ
setup_logging()
logger = logging.getLogger(__name__)


def setup_exception_handler():
    """Настраивает глобальный обработчик исключений"""

    def exception_handler(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return

        logger.critical("Необработанное исключение:",
                        exc_info=(exc_type, exc_value, exc_traceback))

        if QApplication.instance():
            QMessageBox.critical(
                None,
                "Критическая ошибка",
                f"Произошла критическая ошибка:\n{exc_value}\n\n"
                "Подробности в лог-файле."
            )

    sys.excepthook = exception_handler


def main():
    """Основная функция приложения"""
    app = QApplication(sys.argv)
    app.setApplicationName("Focalrina")
    app.setApplicationVersion("1.0.0")

    setup_exception_handler()

    logger.info("🚀 Запуск Focalrina Desktop Bridge")

    # Окружение читается только здесь, дальше конфиг передается явно
    from core.config_manager import get_config, resolve_bridge_config
    bridge_config = resolve_bridge_config(config=get_config())

    from ui.main_window import MainWindow
    main_window = MainWindow(bridge_config)
    main_window.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
