"""Testes para o cache Redis de permissões por papel."""

import json
from unittest.mock import MagicMock, patch
import os

from shared.cache import (
    create_redis_cache,
    get_cache_ttl,
    get_cached_role_permissions,
    invalidate_role_permissions_cache,
    set_cached_role_permissions,
)


class TestRedisCache:
    """Testes para criação do cliente de cache."""

    def test_create_redis_cache_with_url(self):
        """Cliente é criado sem conectar de imediato."""
        cache = create_redis_cache("redis://localhost:6379")
        assert cache is not None

    def test_create_redis_cache_without_url(self):
        assert create_redis_cache(None) is None

    def test_create_redis_cache_with_blank_url(self):
        assert create_redis_cache("   ") is None


class TestRolePermissionsCache:
    """Testes para leitura e escrita das permissões em cache."""

    def test_set_and_get_cached_role_permissions(self):
        """Testa armazenar e recuperar as permissões de um papel."""
        mock_redis = MagicMock()
        permissions = [{"id": 1, "name": "customers:read"}]

        assert set_cached_role_permissions(mock_redis, "STAFF", permissions, ttl=60) is True
        key, data = mock_redis.set.call_args[0]
        assert key == "permissions:role:STAFF"
        assert json.loads(data) == permissions
        assert mock_redis.set.call_args[1] == {"ex": 60}

        mock_redis.get.return_value = data
        assert get_cached_role_permissions(mock_redis, "STAFF") == permissions

    def test_cache_miss_returns_none(self):
        mock_redis = MagicMock()
        mock_redis.get.return_value = None

        assert get_cached_role_permissions(mock_redis, "MANAGER") is None

    def test_without_cache_everything_is_a_no_op(self):
        """Sem Redis configurado as funções não falham."""
        assert get_cached_role_permissions(None, "STAFF") is None
        assert set_cached_role_permissions(None, "STAFF", []) is False
        assert invalidate_role_permissions_cache(None) is False

    def test_redis_errors_are_treated_as_miss(self):
        """Erro de conexão não derruba a requisição."""
        mock_redis = MagicMock()
        mock_redis.get.side_effect = ConnectionError("down")
        mock_redis.set.side_effect = ConnectionError("down")

        assert get_cached_role_permissions(mock_redis, "STAFF") is None
        assert set_cached_role_permissions(mock_redis, "STAFF", []) is False

    def test_corrupted_entry_is_treated_as_miss(self):
        mock_redis = MagicMock()
        mock_redis.get.return_value = "{nao-e-json"

        assert get_cached_role_permissions(mock_redis, "STAFF") is None


class TestCacheInvalidation:
    """Testes para invalidação do cache de permissões."""

    def test_invalidate_single_role(self):
        mock_redis = MagicMock()

        assert invalidate_role_permissions_cache(mock_redis, "MANAGER") is True
        mock_redis.delete.assert_called_once_with("permissions:role:MANAGER")

    def test_invalidate_all_roles(self):
        mock_redis = MagicMock()
        mock_redis.keys.return_value = ["permissions:role:STAFF", "permissions:role:MANAGER"]

        assert invalidate_role_permissions_cache(mock_redis) is True
        mock_redis.keys.assert_called_once_with("permissions:role:*")
        mock_redis.delete.assert_called_once_with("permissions:role:STAFF", "permissions:role:MANAGER")

    def test_invalidate_all_with_empty_cache(self):
        mock_redis = MagicMock()
        mock_redis.keys.return_value = []

        assert invalidate_role_permissions_cache(mock_redis) is True
        mock_redis.delete.assert_not_called()


class TestCacheTtl:
    """Testes para TTL configurável por variável de ambiente."""

    def test_default_ttl(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("CACHE_TTL_PERMISSIONS", None)
            assert get_cache_ttl("permissions") == 300

    def test_ttl_from_env(self):
        with patch.dict(os.environ, {"CACHE_TTL_PERMISSIONS": "60"}):
            assert get_cache_ttl("permissions") == 60

    def test_invalid_ttl_falls_back_to_default(self):
        with patch.dict(os.environ, {"CACHE_TTL_PERMISSIONS": "abc"}):
            assert get_cache_ttl("permissions", default=120) == 120
