import subprocess

import download_models

MODEL = "en_core_web_sm"


class FakeNlp:
    meta = {"spacy_version": ">=3.7"}


def test_installed_model_is_not_downloaded(tmp_path, monkeypatch):
    downloads = []
    monkeypatch.setattr(download_models, "is_model_available", lambda name: True)
    monkeypatch.setattr(download_models, "download_file", lambda url, dest: downloads.append(url) or True)

    assert download_models.main(["--models-dir", str(tmp_path)]) == 0
    assert downloads == []


def test_missing_model_is_downloaded_installed_and_verified(tmp_path, monkeypatch):
    installed = set()
    wheels = []

    def fake_download(url, destination):
        with open(destination, "wb") as f:
            f.write(b"wheel")
        return True

    def fake_install(wheel_path):
        wheels.append(wheel_path)
        installed.add(MODEL)

    monkeypatch.setattr(download_models, "is_model_available", lambda name: name in installed)
    monkeypatch.setattr(download_models, "download_file", fake_download)
    monkeypatch.setattr(download_models, "install_wheel", fake_install)
    monkeypatch.setattr(download_models, "get_nlp", lambda name: FakeNlp())

    assert download_models.main(["--models-dir", str(tmp_path)]) == 0
    assert len(wheels) == 1
    assert wheels[0].endswith("en_core_web_sm-3.7.1-py3-none-any.whl")


def test_failed_download_returns_error(tmp_path, monkeypatch):
    monkeypatch.setattr(download_models, "is_model_available", lambda name: False)
    monkeypatch.setattr(download_models, "download_file", lambda url, dest: False)

    assert download_models.main(["--models-dir", str(tmp_path)]) == 1


def test_install_that_does_not_register_model_returns_error(tmp_path, monkeypatch):
    monkeypatch.setattr(download_models, "is_model_available", lambda name: False)
    monkeypatch.setattr(download_models, "download_file", lambda url, dest: True)
    monkeypatch.setattr(download_models, "install_wheel", lambda path: None)

    assert download_models.main(["--models-dir", str(tmp_path)]) == 1


def test_pip_failure_returns_error(tmp_path, monkeypatch):
    def failing_install(wheel_path):
        raise subprocess.CalledProcessError(1, ["pip", "install", wheel_path])

    monkeypatch.setattr(download_models, "is_model_available", lambda name: False)
    monkeypatch.setattr(download_models, "download_file", lambda url, dest: True)
    monkeypatch.setattr(download_models, "install_wheel", failing_install)

    assert download_models.main(["--models-dir", str(tmp_path)]) == 1
