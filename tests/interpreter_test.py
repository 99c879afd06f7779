import unittest

from orionbasic import BufferConsole, ErrorCode, Interpreter, Limits


class SessionTestCase(unittest.TestCase):
    """Shared helpers for tests that drive a whole interpreter session."""

    limits = Limits(rnd_seed=1)

    def setUp(self):
        self.console = BufferConsole()
        self.basic = Interpreter(self.limits, self.console)

    def run_program(self, text):
        self.assertTrue(self.basic.load_program(text), self.basic.error)
        return self.basic.run()

    def assertOk(self, result):
        self.assertTrue(result, self.basic.error)
        self.assertEqual(self.basic.error[0], ErrorCode.NONE)

    def assertFailed(self, result, code):
        self.assertFalse(result)
        self.assertEqual(self.basic.error[0], code)


class ImmediateModeTestCase(SessionTestCase):

    def test_let_arithmetic(self):
        self.assertOk(self.basic.execute_line("LET A = 10"))
        self.assertOk(self.basic.execute_line("LET B = 20"))
        self.assertOk(self.basic.execute_line("LET C = A + B"))
        self.assertEqual(self.basic.value("C"), 30.0)

    def test_implicit_let(self):
        self.assertOk(self.basic.execute_line("X = 5 * 2"))
        self.assertEqual(self.basic.value("X"), 10.0)

    def test_division_by_zero_leaves_target_untouched(self):
        self.assertFailed(self.basic.execute_line("LET Y = 10 / 0"), ErrorCode.DIVISION_BY_ZERO)
        self.assertIsNone(self.basic.value("Y"))
        self.basic.execute_line("LET Y = 1")
        self.basic.execute_line("LET Y = 10 / 0")
        self.assertEqual(self.basic.value("Y"), 1.0)

    def test_goto_missing_line(self):
        self.assertFailed(self.basic.execute_line("GOTO 999"), ErrorCode.LINE_NOT_FOUND)

    def test_return_and_next_need_frames(self):
        self.assertFailed(self.basic.execute_line("RETURN"), ErrorCode.RETURN_WITHOUT_GOSUB)
        self.assertFailed(self.basic.execute_line("NEXT"), ErrorCode.NEXT_WITHOUT_FOR)
        self.assertFailed(self.basic.execute_line("NEXT I"), ErrorCode.NEXT_WITHOUT_FOR)

    def test_print_formatting(self):
        self.basic.execute_line("LET A = 3")
        self.assertOk(self.basic.execute_line('PRINT "A="; A'))
        self.assertEqual(self.console.take(), "A=3.000000\n")
        self.basic.execute_line('PRINT "X", "Y"')
        self.assertEqual(self.console.take(), "X     Y\n")
        self.basic.execute_line('PRINT "NO NEWLINE";')
        self.assertEqual(self.console.take(), "NO NEWLINE")
        self.basic.execute_line("PRINT")
        self.assertEqual(self.console.take(), "\n")
        self.basic.execute_line("PRINT -1.5, 2 / 3")
        self.assertEqual(self.console.take(), "-1.500000     0.666667\n")

    def test_arrays(self):
        self.assertOk(self.basic.execute_line("DIM ARR(5)"))
        self.assertOk(self.basic.execute_line("LET ARR(1) = 100"))
        self.basic.execute_line("PRINT ARR(1); ARR(2)")
        self.assertEqual(self.console.take(), "100.0000000.000000\n")
        self.assertFailed(self.basic.execute_line("LET X = ARR(6)"), ErrorCode.ARRAY_BOUNDS)
        self.assertFailed(self.basic.execute_line("DIM ARR(3)"), ErrorCode.SYNTAX)
        self.assertFailed(self.basic.execute_line("LET Q = NOPE(1)"), ErrorCode.SYNTAX)

    def test_multi_dimensional_and_string_arrays(self):
        self.assertOk(self.basic.execute_line('DIM M(2, 3), N$(2)'))
        self.assertOk(self.basic.execute_line('M(2, 3) = 7: N$(2) = "B"'))
        self.basic.execute_line('PRINT M(2, 3); N$(2)')
        self.assertEqual(self.console.take(), "7.000000B\n")

    def test_undefined_variable(self):
        self.assertFailed(self.basic.execute_line("PRINT Q"), ErrorCode.UNDEFINED_VARIABLE)

    def test_type_mismatch(self):
        self.assertFailed(self.basic.execute_line("LET A$ = 5"), ErrorCode.TYPE_MISMATCH)
        self.basic.execute_line("DIM Z(3)")
        self.assertFailed(self.basic.execute_line("LET Z = 1"), ErrorCode.TYPE_MISMATCH)

    def test_logical_operators_are_not_supported(self):
        self.assertFailed(self.basic.execute_line("PRINT 1 AND 2"), ErrorCode.SYNTAX)
        self.assertFailed(self.basic.execute_line("LET A = NOT 1"), ErrorCode.SYNTAX)

    def test_unknown_statement(self):
        self.assertFailed(self.basic.execute_line("10"), ErrorCode.SYNTAX)
        self.assertFailed(self.basic.execute_line("LET = 1"), ErrorCode.SYNTAX)
        self.assertFailed(self.basic.execute_line("ELSE PRINT 1"), ErrorCode.SYNTAX)

    def test_error_is_cleared_by_next_call(self):
        self.basic.execute_line("GOTO 999")
        self.assertOk(self.basic.execute_line("PRINT 1"))
        self.assertEqual(self.basic.error, (ErrorCode.NONE, "No error"))

    def test_line_too_long(self):
        self.assertFailed(self.basic.execute_line("REM " + "X" * 300), ErrorCode.PROGRAM_TOO_LARGE)

    def test_loop_on_one_line(self):
        self.assertOk(self.basic.execute_line("FOR I = 1 TO 3: PRINT I;: NEXT I"))
        self.assertEqual(self.console.take(), "1.0000002.0000003.000000")
        self.assertEqual(self.basic.value("I"), 4.0)

    def test_non_finite_string_function_arguments(self):
        self.assertFailed(self.basic.execute_line('PRINT LEFT$("AB", EXP(709) * 10)'),
                          ErrorCode.ILLEGAL_FUNCTION_CALL)
        self.assertFailed(self.basic.execute_line('PRINT MID$("AB", EXP(709) * 10 - EXP(709) * 10)'),
                          ErrorCode.ILLEGAL_FUNCTION_CALL)
        self.assertFailed(self.basic.execute_line('PRINT CHR$(EXP(709) * 10)'),
                          ErrorCode.ILLEGAL_FUNCTION_CALL)

    def test_strings(self):
        self.assertOk(self.basic.execute_line('A$ = "HELLO"'))
        self.basic.execute_line('PRINT LEFT$(A$, 2); LEN(A$)')
        self.assertEqual(self.console.take(), "HE5.000000\n")
        self.basic.execute_line('B$ = A$ + ", " + "WORLD"')
        self.assertEqual(self.basic.value("B$"), "HELLO, WORLD")
        self.basic.execute_line('PRINT STR$(2) + "!"')
        self.assertEqual(self.console.take(), "2.000000!\n")

    def test_if_else(self):
        self.basic.execute_line('IF 1 > 2 THEN PRINT "Y" ELSE PRINT "N"')
        self.assertEqual(self.console.take(), "N\n")
        self.basic.execute_line('IF 2 > 1 THEN PRINT "Y" ELSE PRINT "N"')
        self.assertEqual(self.console.take(), "Y\n")
        self.basic.execute_line('IF 0 THEN PRINT 1: PRINT 2')
        self.assertEqual(self.console.take(), "")
        self.basic.execute_line('A$ = "X": IF A$ = "X" THEN PRINT "EQ"')
        self.assertEqual(self.console.take(), "EQ\n")
        self.assertFailed(self.basic.execute_line("IF 1 PRINT 2"), ErrorCode.SYNTAX)

    def test_nested_if_depth_is_bounded(self):
        self.basic = Interpreter(Limits(max_nesting=8), self.console)
        self.assertFailed(self.basic.execute_line("IF 1 THEN " * 10 + "PRINT 1"), ErrorCode.STACK_OVERFLOW)
        self.assertEqual(self.basic.ctx.depth, 0)
        self.assertOk(self.basic.execute_line("IF 1 THEN " * 3 + "PRINT 1"))
        self.assertEqual(self.console.take(), "1.000000\n")


class ProgramTestCase(SessionTestCase):

    def test_for_step_runs_three_times(self):
        self.assertOk(self.run_program("10 FOR I = 1 TO 5 STEP 2\n15 PRINT I\n20 NEXT I\n"))
        self.assertEqual(self.console.output, "1.000000\n3.000000\n5.000000\n")
        self.assertEqual(self.basic.value("I"), 7.0)
        self.assertEqual(len(self.basic.ctx.for_stack), 0)

    def test_negative_step(self):
        self.assertOk(self.run_program("10 FOR I = 3 TO 1 STEP -1\n20 PRINT I;\n30 NEXT"))
        self.assertEqual(self.console.output, "3.0000002.0000001.000000")

    def test_nested_loops(self):
        program = """
        10 FOR I = 1 TO 2
        20 FOR J = 1 TO 2
        30 PRINT I * 10 + J;
        40 NEXT J, I
        """
        self.assertOk(self.run_program(program))
        self.assertEqual(self.console.output, "11.00000012.00000021.00000022.000000")

    def test_next_with_wrong_variable(self):
        self.assertFailed(self.run_program("10 FOR I = 1 TO 2\n20 NEXT J"), ErrorCode.NEXT_WITHOUT_FOR)
        self.assertTrue(self.basic.error[1].startswith("Line 20: NEXT J"))

    def test_for_reuse_drops_the_older_frame(self):
        self.assertOk(self.run_program("10 FOR I = 1 TO 2\n20 FOR I = 1 TO 3\n30 NEXT I"))
        self.assertEqual(len(self.basic.ctx.for_stack), 0)

    def test_for_stack_capacity(self):
        self.basic = Interpreter(Limits(stack_depth=2), self.console)
        program = "10 FOR A = 1 TO 1\n20 FOR B = 1 TO 1\n30 FOR C = 1 TO 1\n"
        self.assertFailed(self.run_program(program), ErrorCode.STACK_OVERFLOW)
        self.assertIsNone(self.basic.value("C"))

    def test_gosub_return(self):
        program = """
        10 GOSUB 100
        20 PRINT "BACK"
        30 END
        100 PRINT "SUB"
        110 RETURN
        """
        self.assertOk(self.run_program(program))
        self.assertEqual(self.console.output, "SUB\nBACK\n")
        self.assertEqual(len(self.basic.ctx.gosub_stack), 0)

    def test_gosub_returns_to_rest_of_line(self):
        program = '10 GOSUB 100: PRINT "AFTER"\n20 END\n100 PRINT "IN"\n110 RETURN'
        self.assertOk(self.run_program(program))
        self.assertEqual(self.console.output, "IN\nAFTER\n")

    def test_gosub_inside_then_branch_with_else(self):
        program = """
        10 IF 1 THEN GOSUB 100 ELSE PRINT "NO"
        20 PRINT "BACK"
        30 END
        100 PRINT "SUB"
        110 RETURN
        """
        self.assertOk(self.run_program(program))
        self.assertEqual(self.console.output, "SUB\nBACK\n")

    def test_second_gosub_in_the_same_branch(self):
        program = """
        10 IF 1 THEN GOSUB 100: GOSUB 100 ELSE PRINT "NO"
        20 END
        100 PRINT "SUB"
        110 RETURN
        """
        self.assertOk(self.run_program(program))
        self.assertEqual(self.console.output, "SUB\nSUB\n")

    def test_gosub_inside_else_branch(self):
        program = '10 IF 0 THEN PRINT "NO" ELSE GOSUB 100: PRINT "AFTER"\n20 END\n100 PRINT "SUB"\n110 RETURN'
        self.assertOk(self.run_program(program))
        self.assertEqual(self.console.output, "SUB\nAFTER\n")

    def test_for_inside_then_branch_with_else(self):
        program = '10 IF 1 THEN FOR I = 1 TO 2: PRINT I; ELSE PRINT "NO"\n20 NEXT I'
        self.assertOk(self.run_program(program))
        self.assertEqual(self.console.output, "1.0000002.000000")
        self.assertEqual(len(self.basic.ctx.for_stack), 0)

    def test_runaway_gosub(self):
        self.assertFailed(self.run_program("10 GOSUB 10"), ErrorCode.STACK_OVERFLOW)
        self.assertEqual(len(self.basic.ctx.gosub_stack), 32)
        self.assertEqual(self.basic.error[1], "Line 10: GOSUB stack overflow")

    def test_gosub_to_missing_line_pushes_nothing(self):
        self.assertFailed(self.run_program("10 GOSUB 500"), ErrorCode.LINE_NOT_FOUND)
        self.assertEqual(len(self.basic.ctx.gosub_stack), 0)

    def test_goto_and_if_then_line(self):
        program = """
        10 LET N = 0
        20 LET N = N + 1
        30 IF N < 3 THEN 20
        40 PRINT N
        """
        self.assertOk(self.run_program(program))
        self.assertEqual(self.console.output, "3.000000\n")

    def test_end_and_stop(self):
        self.assertOk(self.run_program("10 PRINT 1\n20 END\n30 PRINT 2"))
        self.assertEqual(self.console.take(), "1.000000\n")
        self.assertOk(self.run_program("10 STOP\n20 PRINT 2"))
        self.assertEqual(self.console.take(), "")

    def test_runtime_error_reports_line(self):
        self.assertFailed(self.run_program("10 PRINT 1\n20 PRINT 1 / 0"), ErrorCode.DIVISION_BY_ZERO)
        self.assertEqual(self.basic.error[1], "Line 20: Division by zero")
        self.assertEqual(self.basic.ctx.last_error.column, 8)

    def test_read_data(self):
        program = """
        10 DATA 1, 2, "HI"
        20 READ A, B, C$
        30 PRINT A + B; C$
        """
        self.assertOk(self.run_program(program))
        self.assertEqual(self.console.take(), "3.000000HI\n")
        # A second run starts reading from the first value again
        self.assertOk(self.basic.run())
        self.assertEqual(self.console.take(), "3.000000HI\n")

    def test_data_after_read_and_restore(self):
        program = "10 READ A: RESTORE: READ B\n20 PRINT A + B\n30 DATA 21, 99"
        self.assertOk(self.run_program(program))
        self.assertEqual(self.console.output, "42.000000\n")

    def test_data_after_colon(self):
        self.assertOk(self.run_program('10 PRINT "X": DATA 7\n20 READ A'))
        self.assertEqual(self.basic.value("A"), 7.0)

    def test_out_of_data(self):
        self.assertFailed(self.run_program("10 READ A"), ErrorCode.OUT_OF_DATA)

    def test_read_string_into_number(self):
        self.assertFailed(self.run_program('10 DATA "X"\n20 READ A'), ErrorCode.TYPE_MISMATCH)

    def test_input(self):
        self.console.feed("42", "Ann")
        self.assertOk(self.run_program('10 INPUT "AGE"; A, N$\n20 PRINT A; N$'))
        self.assertEqual(self.console.output, "AGE? ? 42.000000Ann\n")

    def test_input_not_a_number_reads_as_zero(self):
        self.console.feed("abc")
        self.assertOk(self.run_program("10 INPUT A"))
        self.assertEqual(self.basic.value("A"), 0.0)

    def test_input_assignment_is_logged_at_debug(self):
        self.console.feed("5")
        with self.assertLogs("orionbasic.executor", level="DEBUG") as cm:
            self.assertOk(self.run_program("10 INPUT A"))
        self.assertIn("DEBUG:orionbasic.executor:INPUT A = 5.0", cm.output)

    def test_immediate_goto_into_program(self):
        self.basic.load_program('10 PRINT "HI"\n20 END')
        self.assertOk(self.basic.execute_line("GOTO 10"))
        self.assertEqual(self.console.output, "HI\n")

    def test_run_without_program(self):
        self.assertFailed(self.basic.run(), ErrorCode.SYNTAX)


class LoadTestCase(SessionTestCase):

    def test_load_resets_state(self):
        self.assertOk(self.run_program("10 DATA 5\n20 READ A\n30 FOR I = 1 TO 2\n40 GOSUB 100\n100 END"))
        self.assertTrue(self.basic.load_program("10 PRINT 1"))
        self.assertEqual(len(self.basic.variables), 0)
        self.assertEqual(len(self.basic.ctx.for_stack), 0)
        self.assertEqual(len(self.basic.ctx.gosub_stack), 0)
        self.assertEqual(self.basic.ctx.data_ptr, 0)
        self.assertEqual(self.basic.ctx.data, [])
        self.assertEqual(len(self.basic.program), 1)

    def test_run_keeps_variables(self):
        self.basic.load_program("10 PRINT 1")
        self.basic.execute_line("LET K = 9")
        self.assertOk(self.basic.run())
        self.assertEqual(self.basic.value("K"), 9.0)

    def test_load_syntax_error_empties_program(self):
        self.assertFailed(self.basic.load_program("10 PRINT 1\nPRINT 2"), ErrorCode.SYNTAX)
        self.assertEqual(len(self.basic.program), 0)

    def test_load_too_large(self):
        self.basic = Interpreter(Limits(max_program_size=250), self.console)
        self.assertFailed(self.basic.load_program("10 END\n20 END\n30 END"), ErrorCode.PROGRAM_TOO_LARGE)

    def test_enter_line(self):
        self.assertOk(self.basic.enter_line(20, "PRINT 2"))
        self.assertOk(self.basic.enter_line(10, "PRINT 1"))
        self.assertOk(self.basic.run())
        self.assertEqual(self.console.take(), "1.000000\n2.000000\n")
        self.basic.enter_line(20, "")
        self.assertNotIn(20, self.basic.program)

    def test_sessions_are_independent(self):
        other = Interpreter(self.limits, BufferConsole())
        self.basic.execute_line("LET A = 1")
        self.assertIsNone(other.value("A"))
        other.execute_line("GOTO 5")
        self.assertEqual(self.basic.error[0], ErrorCode.NONE)

    def test_init(self):
        self.basic.load_program("10 END")
        self.basic.execute_line("LET A = 1")
        self.basic.init()
        self.assertEqual(len(self.basic.program), 0)
        self.assertIsNone(self.basic.value("A"))


if __name__ == '__main__':
    unittest.main()
