"""Unit tests for InterviewCoachConfig."""

import os

import pytest

from interviewcoach.config import API_KEY_ENV_VAR, InterviewCoachConfig


@pytest.fixture(autouse=True)
def no_api_key_env(monkeypatch):
    monkeypatch.delenv(API_KEY_ENV_VAR, raising=False)


@pytest.mark.unit
class TestInterviewCoachConfig:
    """Test cases for configuration loading."""

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        config = InterviewCoachConfig()

        assert config.config_file is None
        assert config.get('openai.model') == "chatgpt-4o-latest"
        assert config.get('interview.topic') == "JavaScript"
        assert config.get('speech.language') == "en-US"
        assert config.get('openai.request_timeout_seconds') is None

    def test_picks_up_file_in_working_directory(self, tmp_path, monkeypatch, config_file):
        config_file("interview:\n  topic: Go\n")
        monkeypatch.chdir(tmp_path)

        config = InterviewCoachConfig()

        assert config.get('interview.topic') == "Go"

    def test_missing_explicit_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            InterviewCoachConfig(str(tmp_path / "nope.yaml"))

    def test_file_values_merge_over_defaults(self, config_file):
        path = config_file(
            "openai:\n"
            "  model: gpt-test\n"
            "speech:\n"
            "  end_silence_seconds: 2.0\n"
        )

        config = InterviewCoachConfig(path)

        assert config.get('openai.model') == "gpt-test"
        assert config.get('openai.base_url') == "https://api.openai.com/v1/chat/completions"
        assert config.get('speech.end_silence_seconds') == 2.0
        assert config.get('speech.sample_rate') == 16000

    def test_empty_file_uses_defaults(self, config_file):
        config = InterviewCoachConfig(config_file(""))

        assert config.get('interview.topic') == "JavaScript"

    def test_invalid_yaml_raises_value_error(self, config_file):
        with pytest.raises(ValueError):
            InterviewCoachConfig(config_file("openai: [unclosed\n"))

    def test_empty_section_keeps_defaults(self, config_file):
        config = InterviewCoachConfig(config_file("logging:\nspeech:\n  language: fr-FR\n"))

        assert config.get('logging.file_path').endswith("logs/interviewcoach.log")
        assert config.get('logging.level') == "INFO"
        assert config.get('speech.language') == "fr-FR"

    def test_section_that_is_not_a_mapping_raises_value_error(self, config_file):
        with pytest.raises(ValueError, match="logging"):
            InterviewCoachConfig(config_file("logging: verbose\n"))

    def test_non_mapping_raises_value_error(self, config_file):
        with pytest.raises(ValueError):
            InterviewCoachConfig(config_file("- just\n- a list\n"))

    def test_relative_paths_resolve_against_config_dir(self, tmp_path, config_file):
        path = config_file(
            "google_cloud:\n"
            "  credentials_path: creds/service.json\n"
            "logging:\n"
            "  file_path: out/coach.log\n"
        )

        config = InterviewCoachConfig(path)

        assert config.get('google_cloud.credentials_path') == str(tmp_path / "creds/service.json")
        assert config.get('logging.file_path') == str(tmp_path / "out/coach.log")

    def test_get_with_missing_key_returns_default(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = InterviewCoachConfig()

        assert config.get('speech.nonexistent') is None
        assert config.get('nothing.here', 42) == 42

    def test_set_creates_nested_keys(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = InterviewCoachConfig()

        config.set('interview.topic', "Python")
        config.set('extra.section.flag', True)

        assert config.get('interview.topic') == "Python"
        assert config.get('extra.section.flag') is True


@pytest.mark.unit
class TestSecrets:
    """Test cases for API key and credential lookup."""

    def test_api_key_from_file(self, config_file):
        config = InterviewCoachConfig(config_file("openai:\n  api_key: sk-from-file\n"))

        assert config.get_api_key() == "sk-from-file"

    def test_environment_wins_over_file(self, config_file, monkeypatch):
        monkeypatch.setenv(API_KEY_ENV_VAR, "sk-from-env")
        config = InterviewCoachConfig(config_file("openai:\n  api_key: sk-from-file\n"))

        assert config.get_api_key() == "sk-from-env"

    def test_missing_api_key_raises(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = InterviewCoachConfig()

        with pytest.raises(ValueError, match=API_KEY_ENV_VAR):
            config.get_api_key()

    def test_no_credentials_path_means_default_credentials(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert InterviewCoachConfig().get_google_credentials_path() is None

    def test_existing_credentials_file(self, tmp_path, config_file):
        (tmp_path / "service.json").write_text("{}", encoding="utf-8")
        config = InterviewCoachConfig(config_file("google_cloud:\n  credentials_path: service.json\n"))

        path = config.get_google_credentials_path()

        assert os.path.isabs(path)
        assert path.endswith("service.json")

    def test_missing_credentials_file_raises(self, config_file):
        config = InterviewCoachConfig(config_file("google_cloud:\n  credentials_path: missing.json\n"))

        with pytest.raises(FileNotFoundError):
            config.get_google_credentials_path()
