import unittest

from shellgibi.parser import ShellParser


class TestShellParser(unittest.TestCase):
    def setUp(self):
        self.parser = ShellParser()

    def test_plain_arguments_match_whitespace_split(self):
        for line in ["ls", "ls -l -a /tmp", "  grep  -n   foo\tbar.txt  "]:
            cmd = self.parser.parse(line)
            tokens = line.split()
            self.assertEqual(cmd.name, tokens[0])
            self.assertEqual(cmd.args, tokens[1:])
            self.assertEqual(cmd.arg_count, len(tokens) - 1)
            self.assertIsNone(cmd.next)
            self.assertFalse(cmd.background)

    def test_quoted_argument_is_single(self):
        cmd = self.parser.parse("echo \"a b\" 'c d'")
        self.assertEqual(cmd.args, ["a b", "c d"])

    def test_bare_quote_pair_is_not_stripped(self):
        self.assertEqual(self.parser.parse('echo ""').args, ['""'])
        self.assertEqual(self.parser.parse("echo ''").args, ["''"])
        self.assertEqual(self.parser.parse('echo "x"').args, ["x"])

    def test_mismatched_quotes_are_kept(self):
        self.assertEqual(self.parser.parse("echo \"ab'").args, ["\"ab'"])

    def test_three_stage_chain(self):
        chain = self.parser.parse("cmd1 a | cmd2 b | cmd3")
        self.assertEqual([s.name for s in chain], ["cmd1", "cmd2", "cmd3"])
        self.assertEqual(chain.args, ["a"])
        self.assertEqual(chain.next.args, ["b"])
        self.assertIsNone(chain.next.next.next)

    def test_quoted_pipe_is_an_argument(self):
        cmd = self.parser.parse("echo 'a | b'")
        self.assertIsNone(cmd.next)
        self.assertEqual(cmd.args, ["a | b"])

    def test_attached_redirects(self):
        cmd = self.parser.parse("sort <in.txt >out.txt")
        self.assertEqual(cmd.redirects.input, "in.txt")
        self.assertEqual(cmd.redirects.truncate, "out.txt")
        self.assertIsNone(cmd.redirects.append)
        self.assertEqual(cmd.args, [])

    def test_spaced_redirects(self):
        cmd = self.parser.parse("cmd > out.txt >> out2.txt | cmd2")
        self.assertEqual(cmd.redirects.truncate, "out.txt")
        self.assertEqual(cmd.redirects.append, "out2.txt")
        self.assertEqual(cmd.args, [])
        self.assertEqual(cmd.next.name, "cmd2")

    def test_append_redirect(self):
        cmd = self.parser.parse("echo hi >>log.txt")
        self.assertEqual(cmd.redirects.append, "log.txt")
        self.assertIsNone(cmd.redirects.truncate)

    def test_redirect_without_path_is_empty(self):
        self.assertEqual(self.parser.parse("echo hi >").redirects.truncate, "")
        self.assertEqual(self.parser.parse("cat < > x").redirects.input, "")

    def test_background_single_stage(self):
        cmd = self.parser.parse("sleep 10 &")
        self.assertTrue(cmd.background)
        self.assertEqual(cmd.args, ["10"])

    def test_background_without_space(self):
        cmd = self.parser.parse("sleep 10&")
        self.assertTrue(cmd.background)
        self.assertEqual(cmd.args, ["10"])

    def test_background_marks_final_stage_only(self):
        chain = self.parser.parse("sleep 1 | cat &")
        self.assertFalse(chain.background)
        self.assertTrue(chain.next.background)

    def test_lone_ampersand_token_is_ignored(self):
        cmd = self.parser.parse("echo a & b")
        self.assertEqual(cmd.args, ["a", "b"])
        self.assertFalse(cmd.background)

    def test_empty_line(self):
        cmd = self.parser.parse("   \t ")
        self.assertEqual(cmd.name, "")
        self.assertEqual(cmd.args, [])
        self.assertIsNone(cmd.next)


if __name__ == "__main__":
    unittest.main()
