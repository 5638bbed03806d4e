import subprocess
import unittest
from pathlib import Path
from unittest import mock

from paramount import commands
from paramount.allocator import MountPair
from paramount.commands import CommandRunner
from paramount.config import RunConfig
from paramount.errors import SystemCommandError

PAIR = MountPair(3, Path("/tmp/run/mount/d0003"), Path("/tmp/run/client/d0003"))


def _which(name):
    return f"/usr/bin/{name}"


def _completed(cmd, returncode=0, stderr=""):
    return subprocess.CompletedProcess(cmd, returncode, stdout="", stderr=stderr)


@mock.patch.object(commands.shutil, "which", side_effect=_which)
@mock.patch.object(commands.os, "geteuid", return_value=0)
class TestCommandRunner(unittest.TestCase):
    def test_mount_command(self, _euid, _which_mock):
        cmd = CommandRunner(RunConfig()).mount_command(PAIR)
        self.assertEqual(
            cmd,
            [
                "/usr/bin/mount",
                "-t",
                "nfs",
                "-o",
                "rw,nfsvers=3",
                "127.0.0.1:/tmp/run/mount/d0003",
                "/tmp/run/client/d0003",
            ],
        )

    def test_mount_returns_exit_status(self, _euid, _which_mock):
        with mock.patch.object(commands.subprocess, "run") as run:
            run.side_effect = lambda cmd, **kw: _completed(cmd, 32, "access denied")
            self.assertEqual(CommandRunner().mount(PAIR), 32)

    def test_reload_exports_failure(self, _euid, _which_mock):
        with mock.patch.object(commands.subprocess, "run") as run:
            run.side_effect = lambda cmd, **kw: _completed(cmd, 1, "bad export")
            with self.assertRaises(SystemCommandError) as ctx:
                CommandRunner().reload_exports()
        self.assertEqual(ctx.exception.returncode, 1)
        self.assertEqual(ctx.exception.cmd, ["/usr/bin/exportfs", "-ra"])
        self.assertIn("bad export", str(ctx.exception))

    def test_unmount_single_call_force_lazy(self, _euid, _which_mock):
        with mock.patch.object(commands.subprocess, "run") as run:
            run.side_effect = lambda cmd, **kw: _completed(cmd)
            CommandRunner().unmount(["/a", "/b"])
        run.assert_called_once()
        self.assertEqual(run.call_args.args[0], ["/usr/bin/umount", "-f", "-l", "/a", "/b"])

    def test_unmount_nothing(self, _euid, _which_mock):
        with mock.patch.object(commands.subprocess, "run") as run:
            CommandRunner().unmount([])
        run.assert_not_called()

    def test_sudo_prefix_when_not_root(self, euid, _which_mock):
        euid.return_value = 1000
        with mock.patch.dict(commands.os.environ, {"PARAMOUNT_SUDO_CMD": "sudo -n"}):
            self.assertEqual(commands._maybe_sudo(["exportfs", "-ra"]), ["sudo", "-n", "exportfs", "-ra"])

    def test_missing_command(self, _euid, which_mock):
        which_mock.side_effect = lambda name: None
        with self.assertRaises(SystemCommandError) as ctx:
            CommandRunner().mount_command(PAIR)
        self.assertEqual(ctx.exception.returncode, 127)


if __name__ == "__main__":
    unittest.main()
