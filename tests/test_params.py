"""Tests for targetry.params: parameter declarations and interpolation."""

import pytest

from targetry.errors import ConfigurationError
from targetry.params import Parameter, Parameters, Resolver


class TestResolveRef:
    """Test _resolve_ref: dotted reference resolution against context."""

    def test_bare_reference(self):
        r = Resolver({"name": "myapp"})
        assert r._resolve_ref("name") == "myapp"

    def test_dotted_reference_dict(self):
        r = Resolver({"env": {"HOME": "/home/user"}})
        assert r._resolve_ref("env.HOME") == "/home/user"

    def test_dotted_reference_getattr(self):
        class Version:
            major = 3

        r = Resolver({"version": Version()})
        assert r._resolve_ref("version.major") == 3

    def test_undefined_raises(self):
        r = Resolver({"name": "myapp"})
        with pytest.raises(ConfigurationError, match="missing"):
            r._resolve_ref("missing")

    def test_undefined_nested_raises(self):
        r = Resolver({"env": {"HOME": "/home"}})
        with pytest.raises(ConfigurationError, match="env.MISSING"):
            r._resolve_ref("env.MISSING")


class TestResolveValue:
    def test_non_string_passthrough(self):
        assert Resolver({}).resolve(42) == 42

    def test_no_interpolation(self):
        assert Resolver({"name": "app"}).resolve("plain string") == "plain string"

    def test_full_interpolation_preserves_type(self):
        assert Resolver({"count": 42}).resolve("${count}") == 42

    def test_embedded_interpolation_stringifies(self):
        assert Resolver({"name": "app"}).resolve("dist/${name}") == "dist/app"

    def test_multiple_interpolations(self):
        r = Resolver({"major": 1, "minor": 4})
        assert r.resolve("v${major}.${minor}") == "v1.4"

    def test_whitespace_in_reference(self):
        assert Resolver({"name": "app"}).resolve("${ name }") == "app"

    def test_escape(self):
        assert Resolver({"name": "app"}).resolve("$${name}") == "${name}"


class TestParameter:
    def test_env_name_default(self):
        assert Parameter(name="github-token").env_name == "GITHUB_TOKEN"

    def test_env_name_explicit(self):
        assert Parameter(name="token", env="GH_TOKEN").env_name == "GH_TOKEN"

    def test_secret_display_masked(self):
        assert Parameter(name="token", secret=True).display("abc") == "****"

    def test_plain_display(self):
        assert Parameter(name="branch").display("main") == "'main'"


class TestParameters:
    def _params(self, *params: Parameter) -> Parameters:
        p = Parameters()
        for param in params:
            p.declare(param)
        return p

    def test_duplicate_raises(self):
        p = self._params(Parameter(name="branch"))
        with pytest.raises(ConfigurationError, match="branch"):
            p.declare(Parameter(name="branch"))

    def test_mapping(self):
        p = self._params(Parameter(name="a"), Parameter(name="b"))
        assert list(p) == ["a", "b"]
        assert p["a"].name == "a"
        assert len(p) == 2

    def test_default_used(self):
        p = self._params(Parameter(name="branch", default="main"))
        assert p.resolve(environ={}) == {"branch": "main"}

    def test_environment_beats_default(self):
        p = self._params(Parameter(name="branch", default="main"))
        assert p.resolve(environ={"BRANCH": "dev"}) == {"branch": "dev"}

    def test_override_beats_environment(self):
        p = self._params(Parameter(name="branch", default="main"))
        config = p.resolve({"branch": "feature"}, environ={"BRANCH": "dev"})
        assert config == {"branch": "feature"}

    def test_undeclared_override_passed_through(self):
        p = self._params()
        assert p.resolve({"extra": "1"}, environ={}) == {"extra": "1"}

    def test_none_values_omitted(self):
        p = self._params(Parameter(name="token"))
        assert p.resolve(environ={}) == {}

    def test_interpolates_other_parameters(self):
        p = self._params(
            Parameter(name="root", default="/src"),
            Parameter(name="output", default="${root}/output"),
        )
        assert p.resolve(environ={})["output"] == "/src/output"

    def test_interpolates_environment(self):
        p = self._params(Parameter(name="cache", default="${env.HOME}/.cache"))
        assert p.resolve(environ={"HOME": "/home/ci"}) == {"cache": "/home/ci/.cache"}

    def test_interpolation_is_transitive(self):
        p = self._params(
            Parameter(name="base", default="${env.HOMEX}"),
            Parameter(name="out", default="${base}/out"),
        )
        assert p.resolve(environ={"HOMEX": "/h"}) == {"base": "/h", "out": "/h/out"}

    def test_transitive_regardless_of_declaration_order(self):
        p = self._params(
            Parameter(name="dist", default="${output}/dist"),
            Parameter(name="output", default="${root}/output"),
            Parameter(name="root", default="/src"),
        )
        config = p.resolve(environ={})
        assert config["dist"] == "/src/output/dist"
        assert config["output"] == "/src/output"

    def test_transitive_override(self):
        p = self._params(
            Parameter(name="root", default="/src"),
            Parameter(name="output", default="${root}/output"),
        )
        assert p.resolve({"root": "${env.WORK}"}, environ={"WORK": "/w"})["output"] == "/w/output"

    def test_self_reference_raises(self):
        p = self._params(Parameter(name="out", default="${out}/x"))
        with pytest.raises(ConfigurationError, match="out -> out"):
            p.resolve(environ={})

    def test_circular_reference_raises(self):
        p = self._params(
            Parameter(name="a", default="${b}"),
            Parameter(name="b", default="x-${a}"),
        )
        with pytest.raises(ConfigurationError, match="a -> b -> a"):
            p.resolve(environ={})

    def test_env_name_is_reserved(self):
        with pytest.raises(ConfigurationError, match="reserved"):
            self._params(Parameter(name="env"))

    def test_env_override_is_reserved(self):
        with pytest.raises(ConfigurationError, match="reserved"):
            self._params().resolve({"env": "prod"}, environ={})

    def test_undefined_reference_raises(self):
        p = self._params(Parameter(name="output", default="${missing}/out"))
        with pytest.raises(ConfigurationError, match="missing"):
            p.resolve(environ={})

    def test_reads_os_environ_by_default(self, monkeypatch):
        monkeypatch.setenv("TARGETRY_TEST_BRANCH", "release")
        p = self._params(Parameter(name="branch", env="TARGETRY_TEST_BRANCH"))
        assert p.resolve() == {"branch": "release"}

    def test_repr(self):
        assert repr(self._params(Parameter(name="a"))) == "Parameters(params=1)"
