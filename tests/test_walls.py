import random
import threading
import unittest
from unittest import mock
from quoridor_engine.engine import rules
from quoridor_engine.engine.board import BoardState
from quoridor_engine.engine.state import (
    Direction,
    Player,
    Position,
    RowGoal,
    Seat,
    WallOrientation,
    WallPlacement,
)

H = WallOrientation.HORIZONTAL
V = WallOrientation.VERTICAL


def snapshot(board):
    """Everything observable about a board, for before/after comparisons."""
    return (
        board.to_dict(),
        tuple(board.blocked_grid(d) for d in Direction),
        tuple(board.placed_walls()),
    )


def all_have_path(board):
    return all(board.has_path(p) for p in board.players)


class TestWallPlacement(unittest.TestCase):
    def test_wall_sets_four_edges_and_owner(self):
        board = BoardState.new_game(2)
        a, b = board.players
        wall = WallPlacement(3, 2, H)
        self.assertTrue(board.can_place_wall(a, wall))
        self.assertTrue(board.apply_wall(a, wall))
        self.assertEqual(board.walls_remaining(a), 9)
        self.assertEqual(board.walls_remaining(b), 10)
        self.assertTrue(board.is_blocked(Position(3, 2), Direction.SOUTH))
        self.assertTrue(board.is_blocked(Position(3, 3), Direction.SOUTH))
        self.assertTrue(board.is_blocked(Position(4, 2), Direction.NORTH))
        self.assertTrue(board.is_blocked(Position(4, 3), Direction.NORTH))
        self.assertFalse(board.is_blocked(Position(3, 4), Direction.SOUTH))
        self.assertIs(board.wall_owner(H, 3, 2), a)
        self.assertIsNone(board.wall_owner(V, 3, 2))
        self.assertEqual(board.placed_walls(), [(wall, a)])
        self.assertEqual(
            board.to_dict()["walls"],
            [{"row": 3, "col": 2, "orientation": "H", "owner": a.name}],
        )

    def test_segment_owner(self):
        board = BoardState.new_game(2)
        a, b = board.players
        self.assertTrue(board.apply_wall(a, WallPlacement(3, 2, H)))
        self.assertTrue(board.apply_wall(b, WallPlacement(5, 5, V)))
        self.assertIs(board.segment_owner(Position(3, 3), Direction.SOUTH), a)
        self.assertIs(board.segment_owner(Position(4, 2), Direction.NORTH), a)
        self.assertIs(board.segment_owner(Position(6, 5), Direction.EAST), b)
        self.assertIs(board.segment_owner(Position(5, 6), Direction.WEST), b)
        self.assertIsNone(board.segment_owner(Position(3, 4), Direction.SOUTH))
        self.assertIsNone(board.segment_owner(Position(0, 0), Direction.NORTH))

    def test_overlap_rejected(self):
        board = BoardState.new_game(2)
        a, b = board.players
        self.assertTrue(board.apply_wall(a, WallPlacement(0, 0, H)))
        before = snapshot(board)
        self.assertFalse(board.can_place_wall(b, WallPlacement(0, 0, H)))
        self.assertFalse(board.apply_wall(b, WallPlacement(0, 1, H)))
        self.assertEqual(snapshot(board), before)
        # end to end is fine
        self.assertTrue(board.apply_wall(b, WallPlacement(0, 2, H)))

    def test_vertical_overlap_rejected(self):
        board = BoardState.new_game(2)
        a, b = board.players
        self.assertTrue(board.apply_wall(a, WallPlacement(2, 2, V)))
        self.assertFalse(board.apply_wall(b, WallPlacement(3, 2, V)))
        self.assertFalse(board.apply_wall(b, WallPlacement(1, 2, V)))
        self.assertTrue(board.apply_wall(b, WallPlacement(4, 2, V)))

    def test_crossing_rejected(self):
        board = BoardState.new_game(2)
        a, b = board.players
        self.assertTrue(board.apply_wall(a, WallPlacement(3, 3, H)))
        self.assertTrue(rules.conflicts(board, WallPlacement(3, 3, V)))
        self.assertFalse(board.apply_wall(b, WallPlacement(3, 3, V)))
        self.assertEqual(board.walls_remaining(b), 10)
        # T-junctions do not cross
        self.assertTrue(board.apply_wall(b, WallPlacement(2, 3, V)))
        self.assertTrue(board.apply_wall(b, WallPlacement(3, 4, V)))

    def test_no_walls_left(self):
        players = [Player("a"), Player("b")]
        board = BoardState(
            players,
            seats=[
                Seat(Position(0, 1), RowGoal(2), 0),
                Seat(Position(2, 1), RowGoal(0), 1),
            ],
            size=3,
        )
        a, b = players
        wall = WallPlacement(1, 1, H, board.wall_range)
        self.assertFalse(board.can_place_wall(a, wall))
        self.assertFalse(board.apply_wall(a, wall))
        self.assertTrue(board.apply_wall(b, wall))
        self.assertEqual(board.walls_remaining(b), 0)
        self.assertFalse(board.apply_wall(b, WallPlacement(0, 0, V, board.wall_range)))

    def test_missing_or_out_of_range_placement(self):
        board = BoardState.new_game(2, size=3)
        a, _ = board.players
        self.assertFalse(board.can_place_wall(a, None))
        self.assertFalse(board.apply_wall(a, None))
        # valid for a 9x9 board, off the anchor grid of a 3x3 one
        self.assertFalse(board.can_place_wall(a, WallPlacement(5, 5, H)))
        self.assertFalse(board.apply_wall(a, WallPlacement(0, 2, V)))
        self.assertEqual(board.walls_remaining(a), 10)


class TestConnectivity(unittest.TestCase):
    def test_last_corridor_wall_rejected(self):
        board = BoardState.new_game(2, size=3)
        a, b = board.players
        wr = board.wall_range
        # leaves only the right-hand column open for a
        self.assertTrue(board.apply_wall(a, WallPlacement(0, 0, H, wr)))
        self.assertEqual(board.walls_remaining(a), 9)

        cut = WallPlacement(0, 1, V, wr)
        self.assertTrue(board.can_place_wall(a, cut))
        before = snapshot(board)
        self.assertFalse(board.apply_wall(a, cut))
        self.assertEqual(board.walls_remaining(a), 9)
        self.assertEqual(snapshot(board), before)
        self.assertTrue(all_have_path(board))

    def test_wall_rejected_when_it_traps_another_player(self):
        board = BoardState.new_game(2, size=3)
        a, b = board.players
        wr = board.wall_range
        self.assertTrue(board.apply_wall(a, WallPlacement(0, 0, H, wr)))
        self.assertFalse(board.apply_wall(b, WallPlacement(0, 1, V, wr)))
        self.assertEqual(board.walls_remaining(b), 10)

    def test_rejected_wall_would_have_cut_a_path(self):
        board = BoardState.new_game(2, size=3)
        a, _ = board.players
        wr = board.wall_range
        self.assertTrue(board.apply_wall(a, WallPlacement(0, 0, H, wr)))
        cut = WallPlacement(0, 1, V, wr)
        board._set_wall(cut, a)
        self.assertFalse(board.has_path(a))
        board._set_wall(cut, None)
        self.assertTrue(board.has_path(a))

    def test_invariants_over_placement_sequence(self):
        # Offer every anchor in turn to four players on a small board.
        board = BoardState.new_game(4, size=5)
        players = board.players
        used_edges = set()
        candidates = [
            WallPlacement(r, c, o, board.wall_range)
            for r in range(board.wall_range)
            for c in range(board.wall_range)
            for o in (H, V)
        ]
        placed = 0
        for i, wall in enumerate(candidates):
            player = players[i % len(players)]
            geometric_ok = board.can_place_wall(player, wall)
            before = snapshot(board)
            if board.apply_wall(player, wall):
                placed += 1
                edges = set(rules.wall_segments(wall))
                self.assertFalse(edges & used_edges)
                used_edges |= edges
                self.assertTrue(all_have_path(board))
                continue
            self.assertEqual(snapshot(board), before)
            if geometric_ok:
                board._set_wall(wall, player)
                self.assertFalse(all_have_path(board))
                board._set_wall(wall, None)
                self.assertEqual(snapshot(board), before)
        self.assertGreater(placed, 0)
        self.assertEqual(sum(board.walls_remaining(p) for p in players), 20 - placed)

    def test_path_check_error_rolls_back_wall(self):
        board = BoardState.new_game(2)
        a, _ = board.players
        before = snapshot(board)
        with mock.patch.object(rules, "first_cut_off", side_effect=RuntimeError("boom")):
            with self.assertRaises(RuntimeError):
                board.apply_wall(a, WallPlacement(3, 2, H))
        self.assertEqual(snapshot(board), before)
        self.assertIsNone(board.wall_owner(H, 3, 2))
        self.assertFalse(board.is_blocked(Position(3, 2), Direction.SOUTH))
        self.assertEqual(board.walls_remaining(a), 10)
        self.assertTrue(board.apply_wall(a, WallPlacement(3, 2, H)))


class TestConcurrentPlacement(unittest.TestCase):
    def test_threads_share_one_board(self):
        board = BoardState.new_game(4, size=5)
        wr = board.wall_range
        placed = []
        errors = []

        def worker(seed):
            rng = random.Random(seed)
            try:
                for _ in range(40):
                    player = rng.choice(board.players)
                    wall = WallPlacement(rng.randrange(wr), rng.randrange(wr), rng.choice((H, V)), wr)
                    if board.apply_wall(player, wall):
                        placed.append(wall)
                    if not board.has_path(rng.choice(board.players)):
                        errors.append(f"path lost after {wall}")
            except Exception as exc:
                errors.append(repr(exc))

        threads = [threading.Thread(target=worker, args=(seed,)) for seed in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(errors, [])
        self.assertTrue(all_have_path(board))
        south = board.blocked_grid(Direction.SOUTH)
        north = board.blocked_grid(Direction.NORTH)
        east = board.blocked_grid(Direction.EAST)
        west = board.blocked_grid(Direction.WEST)
        for r in range(board.size):
            for c in range(board.size):
                if r + 1 < board.size:
                    self.assertEqual(south[r][c], north[r + 1][c])
                if c + 1 < board.size:
                    self.assertEqual(east[r][c], west[r][c + 1])
        self.assertEqual(len(board.placed_walls()), len(placed))
        self.assertEqual(
            sum(board.walls_remaining(p) for p in board.players), 20 - len(placed)
        )
        used_edges = set()
        for wall, _ in board.placed_walls():
            edges = set(rules.wall_segments(wall))
            self.assertFalse(edges & used_edges)
            used_edges |= edges


if __name__ == '__main__':
    unittest.main()
