# ui/main_window.py

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QCheckBox, QSlider,
    QLabel, QTextEdit, QGroupBox, QFormLayout, QMessageBox, QFileDialog
)
from PySide6.QtCore import Qt
import base64
import logging
import mimetypes
from pathlib import Path

from core.config_manager import get_config
from core.request_worker import RequestWorker

logger = logging.getLogger(__name__)

SECTION_SWITCHES = (
    ('summary', "Summary"),
    ('guidance', "Guidance"),
    ('explanation', "Explanation"),
    ('answer', "Answer"),
)


def image_to_data_url(path: Path) -> str:
    """Читает файл изображения и возвращает data URL"""
    mime_type = mimetypes.guess_type(str(path))[0] or 'application/octet-stream'
    encoded = base64.b64encode(path.read_bytes()).decode('ascii')
    return f"data:{mime_type};base64,{encoded}"


class MainWindow(QWidget):
    """Главное окно: ввод вопроса, настройки ответа и результат"""

    def __init__(self, bridge_config):
        super().__init__()
        self.bridge_config = bridge_config
        self.worker = None
        self.images = []  # data URLs прикрепленных изображений
        self._init_ui()

    def _init_ui(self):
        """Инициализация UI"""
        self.setWindowTitle("Focalrina")
        self.setMinimumWidth(500)

        config = get_config()
        self.resize(config.get('ui.window_width', 720), config.get('ui.window_height', 640))

        layout = QVBoxLayout()

        # ========== СЕКЦИЯ 1: Вопрос ==========
        prompt_group = QGroupBox("Question")
        prompt_layout = QVBoxLayout()

        self.prompt_input = QTextEdit()
        self.prompt_input.setPlaceholderText("Type your question...")
        prompt_layout.addWidget(self.prompt_input)

        images_layout = QHBoxLayout()
        self.add_image_btn = QPushButton("Add Image")
        self.add_image_btn.clicked.connect(self.on_add_image)
        images_layout.addWidget(self.add_image_btn)

        self.clear_images_btn = QPushButton("Clear Images")
        self.clear_images_btn.clicked.connect(self.on_clear_images)
        images_layout.addWidget(self.clear_images_btn)

        self.images_label = QLabel("No images")
        images_layout.addWidget(self.images_label)
        images_layout.addStretch()
        prompt_layout.addLayout(images_layout)

        prompt_group.setLayout(prompt_layout)
        layout.addWidget(prompt_group)

        # ========== СЕКЦИЯ 2: Настройки ответа ==========
        settings_group = QGroupBox("Answer Settings")
        settings_layout = QFormLayout()

        switches_layout = QHBoxLayout()
        self.switches = {}
        for key, title in SECTION_SWITCHES:
            checkbox = QCheckBox(title)
            checkbox.setChecked(True)
            self.switches[key] = checkbox
            switches_layout.addWidget(checkbox)
        settings_layout.addRow("Sections:", switches_layout)

        # Слайдер 0..100 отображается в politeness 0.0..1.0
        self.politeness_slider = QSlider(Qt.Orientation.Horizontal)
        self.politeness_slider.setRange(0, 100)
        self.politeness_slider.setSingleStep(25)
        self.politeness_slider.setPageStep(25)
        self.politeness_slider.setValue(int(config.get('ui.politeness', 0.5) * 100))
        settings_layout.addRow("Politeness:", self.politeness_slider)

        settings_group.setLayout(settings_layout)
        layout.addWidget(settings_group)

        # ========== СЕКЦИЯ 3: Controls ==========
        self.send_btn = QPushButton("Send")
        self.send_btn.setMinimumHeight(40)
        self.send_btn.clicked.connect(self.on_send)
        layout.addWidget(self.send_btn)

        # ========== СЕКЦИЯ 4: Ответ ==========
        self.result_view = QTextEdit()
        self.result_view.setReadOnly(True)
        self.result_view.setPlaceholderText("The answer will appear here")
        layout.addWidget(self.result_view, stretch=1)

        self.setLayout(layout)

    def build_payload(self) -> dict:
        """Собирает запрос в формате, который ожидает мост"""
        payload = {
            'prompt': self.prompt_input.toPlainText(),
            'options': {key: checkbox.isChecked() for key, checkbox in self.switches.items()},
            'sliders': {'politeness': self.politeness_slider.value() / 100},
        }
        if self.images:
            payload['images'] = {'problem': list(self.images)}
        return payload

    def on_add_image(self):
        """Прикрепление изображения к вопросу"""
        file_name, _ = QFileDialog.getOpenFileName(
            self, "Select Image", "", "Images (*.png *.jpg *.jpeg *.webp *.gif)"
        )
        if not file_name:
            return

        try:
            self.images.append(image_to_data_url(Path(file_name)))
        except OSError as e:
            logger.error(f"Не удалось прочитать изображение {file_name}: {e}")
            QMessageBox.warning(self, "Image Error", f"Cannot read image:\n{e}")
            return

        self.images_label.setText(f"{len(self.images)} image(s)")

    def on_clear_images(self):
        self.images = []
        self.images_label.setText("No images")

    def on_send(self):
        """Отправка запроса в фоновом потоке"""
        if not self.prompt_input.toPlainText().strip() and not self.images:
            return

        self._set_busy(True)
        self.result_view.setPlainText("Thinking...")

        self.worker = RequestWorker(self.build_payload(), self.bridge_config)
        self.worker.finished_signal.connect(self._on_request_finished)
        self.worker.start()

    def _on_request_finished(self, success, message):
        """Обработчик завершения запроса"""
        self._set_busy(False)

        if success:
            self.result_view.setPlainText(message)
            self.prompt_input.clear()
            self.on_clear_images()
        else:
            self.result_view.clear()
            QMessageBox.critical(self, "Request Failed", message)

    def _set_busy(self, busy):
        self.send_btn.setEnabled(not busy)
        self.add_image_btn.setEnabled(not busy)
        self.clear_images_btn.setEnabled(not busy)

    def closeEvent(self, event):
        """Сохраняет размер окна и настройку вежливости при закрытии"""
        config = get_config()
        config.set('ui.window_width', self.width())
        config.set('ui.window_height', self.height())
        config.set('ui.politeness', self.politeness_slider.value() / 100)
        config.save()

        if self.worker and self.worker.isRunning():
            # Запрос нельзя отменить: ждем его завершения
            self.worker.wait()

        event.accept()
