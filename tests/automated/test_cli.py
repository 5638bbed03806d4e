import contextlib
import io
import os
import unittest
from importlib import metadata
from unittest import mock

from paramount import cli, version
from paramount.controller import RunResult
from paramount.logs import LOGGER_NAME, setup_logging
from paramount.version import get_version


class TestCli(unittest.TestCase):
    def tearDown(self):
        setup_logging(False)

    def _run(self, argv):
        stdout, stderr = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            try:
                code = cli.main(argv)
            except SystemExit as exc:
                code = exc.code
        return code, stdout.getvalue(), stderr.getvalue()

    def test_help_exits_one(self):
        code, stdout, _ = self._run(["--help"])
        self.assertEqual(code, 1)
        self.assertIn("--threads", stdout)

    def test_bad_threads_exits_one(self):
        code, _, stderr = self._run(["-t", "many"])
        self.assertEqual(code, 1)
        self.assertIn("invalid int value", stderr)

    def test_negative_threads_exits_one(self):
        code, _, _ = self._run(["--threads", "-3"])
        self.assertEqual(code, 1)

    def test_unknown_flag_exits_one(self):
        code, _, _ = self._run(["--frobnicate"])
        self.assertEqual(code, 1)

    def test_run_builds_config_and_returns_exit_code(self):
        with mock.patch.object(cli, "LifecycleController") as controller_cls:
            controller_cls.return_value.run.return_value = RunResult(verified=True, cleaned=True)
            code, _, _ = self._run(["-p", "-t", "4", "--exports-file", "/tmp/x.exports"])

        self.assertEqual(code, 0)
        config = controller_cls.call_args.args[0]
        self.assertEqual(config.threads, 4)
        self.assertTrue(config.preserve)
        self.assertFalse(config.verbose)
        self.assertEqual(config.exports_file, "/tmp/x.exports")

    def test_failed_run_exits_one(self):
        with mock.patch.object(cli, "LifecycleController") as controller_cls:
            controller_cls.return_value.run.return_value = RunResult(
                failures=2, verified=True, cleaned=True
            )
            code, _, _ = self._run(["-v"])
        self.assertEqual(code, 1)
        self.assertTrue(controller_cls.call_args.args[0].verbose)

    def test_default_threads(self):
        with mock.patch.object(cli, "LifecycleController") as controller_cls:
            controller_cls.return_value.run.return_value = RunResult(verified=True, cleaned=True)
            self._run([])
        self.assertEqual(controller_cls.call_args.args[0].threads, cli.RunConfig().threads)


class TestVersion(unittest.TestCase):
    def test_env_override(self):
        with mock.patch.dict(os.environ, {"PARAMOUNT_VERSION": "9.9"}):
            self.assertEqual(get_version(), "9.9")

    def test_installed_metadata(self):
        with mock.patch.dict(os.environ, {"PARAMOUNT_VERSION": ""}), mock.patch.object(
            version.metadata, "version", return_value="0.1.0"
        ) as lookup:
            self.assertEqual(get_version(), "0.1.0")
        lookup.assert_called_once_with("paramount")

    def test_not_installed(self):
        with mock.patch.dict(os.environ, {"PARAMOUNT_VERSION": ""}), mock.patch.object(
            version.metadata, "version", side_effect=metadata.PackageNotFoundError("paramount")
        ):
            self.assertEqual(get_version(), "unknown")


class TestLogging(unittest.TestCase):
    def tearDown(self):
        setup_logging(False)

    def test_verbose_narrates_debug(self):
        stream = io.StringIO()
        logger = setup_logging(True, stream=stream)
        logger.getChild("allocator").debug("Created mount %s", "/x")
        self.assertEqual(stream.getvalue(), "Created mount /x\n")

    def test_quiet_hides_debug_and_does_not_stack_handlers(self):
        stream = io.StringIO()
        setup_logging(False, stream=stream)
        logger = setup_logging(False, stream=stream)
        logger.debug("hidden")
        self.assertEqual(len(logger.handlers), 1)
        self.assertEqual(logger.name, LOGGER_NAME)
        self.assertEqual(stream.getvalue(), "")


if __name__ == "__main__":
    unittest.main()
