"""Tests for armature.utils.summary."""

import io

from rich.console import Console

from armature.kinematics.models import articulated_human
from armature.utils.summary import (
    chain_table,
    ik_results_table,
    print_chain_summary,
    print_ik_summary,
)


def _console() -> Console:
    return Console(file=io.StringIO(), width=200, color_system=None)


class TestChainSummary:
    def test_one_row_per_joint(self):
        chain = articulated_human()
        table = chain_table(chain)
        assert table.row_count == len(chain.joint_names)
        assert len(table.columns) == 6

    def test_print(self):
        console = _console()
        print_chain_summary(articulated_human(), console)
        out = console.file.getvalue()
        for name in ("r_shoulder", "r_elbow", "r_wrist", "right_hand", "[0:3]", "xyz"):
            assert name in out


class TestIKSummary:
    def test_rows(self):
        chain = articulated_human()
        results = [chain.solve_ik([5.8, 7.0, 0.0]), chain.solve_ik([100.0, 0.0, 0.0], max_iterations=2)]
        assert ik_results_table(results).row_count == 2

        console = _console()
        print_ik_summary(results, console)
        out = console.file.getvalue()
        assert "yes" in out
        assert "no" in out
