import os
import subprocess
import sys
import tempfile
import unittest

import pexpect

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
PROMPT = r"shellgibi\$ "


def shell_env():
    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [ROOT, env.get("PYTHONPATH")]))
    return env


class TestShellLoop(unittest.TestCase):
    """
    Prueba el ciclo completo, con la entrada por un pipe.
    """

    @classmethod
    def setUpClass(cls):
        cls.temp_dir = tempfile.TemporaryDirectory()
        cls.test_file1 = os.path.join(cls.temp_dir.name, "test1.txt")
        with open(cls.test_file1, "w") as f:
            f.write("line1\nline2\nline3\n")

    @classmethod
    def tearDownClass(cls):
        cls.temp_dir.cleanup()

    def run_shell_command(self, command, timeout=10, **extra_env):
        env = shell_env()
        env.update(extra_env)
        process = subprocess.run(
            [sys.executable, "-m", "shellgibi"],
            input=command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            timeout=timeout,
            env=env,
            cwd=self.temp_dir.name,
        )
        return process.stdout, process.stderr, process.returncode

    def test_command_execution(self):
        stdout, _, _ = self.run_shell_command("echo hello\nexit\n")
        self.assertIn("hello", stdout)

    def test_pipe_operation(self):
        stdout, _, _ = self.run_shell_command(f"cat {self.test_file1} | wc -l\nexit\n")
        self.assertEqual(stdout.strip(), "3")

    def test_multiple_pipes(self):
        stdout, _, _ = self.run_shell_command(
            f"cat {self.test_file1} | grep line | wc -l\nexit\n"
        )
        self.assertEqual(stdout.strip(), "3")

    def test_whitespace_handling(self):
        stdout1, _, _ = self.run_shell_command("echo hello\nexit\n")
        stdout2, _, _ = self.run_shell_command("   echo   hello   \nexit\n")
        self.assertEqual(stdout1, stdout2)

    def test_unknown_command_keeps_loop_alive(self):
        stdout, stderr, _ = self.run_shell_command("nosuchcmd-shellgibi\necho alive\n")
        self.assertIn("command not found", stderr)
        self.assertIn("alive", stdout)

    def test_debug_dumps_parsed_chain(self):
        _, stderr, _ = self.run_shell_command(
            "echo a > out.txt | cat\nexit\n", SHELLGIBI_DEBUG="1"
        )
        self.assertIn("Command: <echo>", stderr)
        self.assertIn("1: out.txt", stderr)
        self.assertIn("Piped to:", stderr)

    def test_end_of_input_leaves_loop(self):
        _, _, returncode = self.run_shell_command("echo bye\n")
        self.assertEqual(returncode, 0)


class TestInteractiveShell(unittest.TestCase):
    """
    Prueba la shell en una terminal, como la usaria una persona.
    """

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.shell = pexpect.spawn(
            sys.executable,
            ["-m", "shellgibi"],
            cwd=self.temp_dir.name,
            env=shell_env(),
            encoding="utf-8",
            timeout=10,
        )
        self.shell.expect(PROMPT)

    def tearDown(self):
        self.shell.close(force=True)
        self.temp_dir.cleanup()

    def test_redirection_round_trip(self):
        self.shell.sendline("echo hola mundo > test.txt")
        self.shell.expect(PROMPT)
        self.shell.sendline("cat < test.txt")
        self.shell.expect("hola mundo")
        self.shell.expect(PROMPT)
        self.shell.sendline("exit")
        self.shell.expect(pexpect.EOF)

    def test_background_job_returns_prompt(self):
        self.shell.sendline("sleep 3 &")
        self.shell.expect(r"\[1\] \d+")
        self.shell.expect(PROMPT, timeout=2)
        self.shell.sendline("exit")
        self.shell.expect(pexpect.EOF)

    def test_usage_error_is_reported(self):
        self.shell.sendline("psvis 1")
        self.shell.expect("psvis requires two arguments")
        self.shell.expect(PROMPT)

    def test_end_of_input_exits(self):
        self.shell.sendeof()
        self.shell.expect(pexpect.EOF)


if __name__ == "__main__":
    unittest.main()
