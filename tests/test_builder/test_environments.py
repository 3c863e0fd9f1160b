"""Tests for apicol.builder.environments."""

from __future__ import annotations

from apicol.builder.environments import build_environments
from apicol.models import Environment, ImportSettings, ServerEntry, Variable


class TestBuildEnvironments:
    def test_one_environment_per_server(self) -> None:
        servers = [
            ServerEntry(url_template="https://prod.example.com/", name="Production"),
            ServerEntry(url_template="https://prod.example.com/"),
            ServerEntry(url_template="https://dev.example.com//"),
        ]
        environments = build_environments(servers)
        assert [env.name for env in environments] == ["Production", "env2", "env3"]
        assert [env.variables[0].value for env in environments] == [
            "https://prod.example.com",
            "https://prod.example.com",
            "https://dev.example.com",
        ]

    def test_variable_shape(self) -> None:
        (environment,) = build_environments([ServerEntry(url_template="https://api.imgflip.com")])
        assert environment == Environment(
            name="env1",
            variables=(Variable(enabled=True, key="BaseUrl", value="https://api.imgflip.com", secret=False),),
        )

    def test_settings(self) -> None:
        settings = ImportSettings(base_url_variable="Host", env_name_prefix="server")
        (environment,) = build_environments([ServerEntry(url_template="http://x")], settings)
        assert environment.name == "server1"
        assert environment.variables[0].key == "Host"

    def test_no_servers(self) -> None:
        assert build_environments([]) == ()
