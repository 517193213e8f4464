"""
Unit Tests for Pipeline Configuration

Environment variable handling is tested with patch.dict.
"""

from unittest.mock import patch

import pytest

from medreport_rag.config import PipelineConfig
from medreport_rag.core.errors import ConfigurationError


class TestPipelineConfig:

    def test_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            config = PipelineConfig.from_env()

        assert config.generation_mode == "free_text"
        assert config.embedding_provider == "openai"
        assert config.embedding_dim == 1536
        assert (config.chunk_size, config.chunk_overlap) == (1000, 200)
        assert (config.similarity_floor, config.match_count) == (0.7, 5)
        assert config.rag_enabled is False

    def test_gemini_provider_defaults(self):
        env = {"EMBEDDING_PROVIDER": "gemini", "GEMINI_API_KEY": "g"}
        with patch.dict("os.environ", env, clear=True):
            config = PipelineConfig.from_env()

        assert config.embedding_model == "text-embedding-004"
        assert config.embedding_dim == 768
        assert config.embedding_api_key == "g"
        assert config.rag_enabled is True

    def test_generation_mode_from_env(self):
        with patch.dict("os.environ", {"GENERATION_MODE": "STRUCTURED"}, clear=True):
            assert PipelineConfig.from_env().generation_mode == "structured"

    def test_generation_key_falls_back_to_openai_key(self):
        with patch.dict("os.environ", {"OPENAI_API_KEY": "sk-1"}, clear=True):
            assert PipelineConfig.from_env().generation_api_key == "sk-1"

    def test_use_postgres_flag(self):
        with patch.dict("os.environ", {"USE_POSTGRES": "false"}, clear=True):
            assert PipelineConfig.from_env().use_postgres is False

    def test_unknown_generation_mode(self):
        with pytest.raises(ConfigurationError):
            PipelineConfig(generation_mode="poetry")

    def test_unknown_embedding_provider(self):
        with pytest.raises(ConfigurationError):
            PipelineConfig(embedding_provider="word2vec")

    @pytest.mark.parametrize("size,overlap", [(1000, 0), (1000, 1000), (200, 500)])
    def test_invalid_chunk_window(self, size, overlap):
        with pytest.raises(ConfigurationError):
            PipelineConfig(chunk_size=size, chunk_overlap=overlap)
