"""Static Exchange Evaluation (SEE): estimates material outcome of capture chains."""

import logging

import chess

from explainer.analysis.attacks import attackers
from explainer.analysis.board import Board, Move, Square, to_chess_square
from explainer.analysis.constants import piece_value
from explainer.analysis.pool import BoardPool

logger = logging.getLogger(__name__)


def _can_capture_on(cb: chess.Board, from_sq: Square, target: Square, color: chess.Color) -> bool:
    """Check if the piece on from_sq can actually capture on target.

    Returns False if the piece is pinned to its king and target is off the
    pin ray, or if the capture would leave the king in check.
    """
    frm, to = to_chess_square(from_sq), to_chess_square(target)
    if cb.is_pinned(color, frm) and not cb.pin(color, frm) & chess.BB_SQUARES[to]:
        return False
    promotion = None
    if cb.piece_type_at(frm) == chess.PAWN and chess.square_rank(to) in (0, 7):
        promotion = chess.QUEEN
    return not cb.is_into_check(chess.Move(frm, to, promotion=promotion))


def legal_captures(board: Board, target: Square, color: chess.Color) -> list[tuple[int, Square]]:
    """color's pieces that can legally capture on target, cheapest first.

    Legality is settled by python-chess on the same placement with color to
    move: a pinned piece may only capture along the pin line, a king may not
    take a guarded piece, and when color is in check only captures that
    resolve the check count.
    """
    cb = board.to_chess_board(color)
    result = []
    for sq in attackers(board, target, color):
        if not _can_capture_on(cb, sq, target, color):
            continue
        result.append((piece_value(board.piece_at(sq)), sq))
    result.sort()
    return result


def _exchange(
    board: Board,
    target: Square,
    attacker_piece: chess.Piece,
    attacker_color: chess.Color,
    source: Square,
    pool: BoardPool,
) -> int:
    victim = board.piece_at(target)
    gain = [piece_value(victim) if victim is not None else 0]

    with pool.rent(board) as sim:
        # The initial capture is the move under evaluation and always happens
        sim.set_piece_at(source, None)
        sim.set_piece_at(target, attacker_piece)
        on_target = piece_value(attacker_piece)
        side = not attacker_color

        while True:
            candidates = legal_captures(sim, target, side)
            if not candidates:
                break
            value, sq = candidates[0]

            # gain[d] = value of the piece about to be captured - gain[d-1]
            gain.append(on_target - gain[-1])
            if max(-gain[-2], gain[-1]) < 0:
                break

            sim.set_piece_at(target, sim.remove_piece_at(sq))
            on_target = value
            side = not side

    # Back-propagation: each side may stop at its most favorable point
    for d in range(len(gain) - 1, 0, -1):
        gain[d - 1] = -max(-gain[d - 1], gain[d])
    return gain[0]


def evaluate_exchange(
    board: Board,
    target: Square,
    attacker_piece: chess.Piece,
    attacker_color: chess.Color,
    source: Square,
    *,
    pool: BoardPool | None = None,
) -> int:
    """Net material swing, in pawns, of attacker_piece moving from source to target.

    Positive means the attacking side comes out ahead after the full
    rational exchange on target. Recaptures are chosen least-valuable first,
    are filtered for pin and check legality, and x-ray attackers join as the
    pieces in front of them are lifted. Either side may stop capturing when
    continuing would cost it material.

    If nothing can recapture, the result is the raw value of the piece on
    target (0 for an empty square). Inconsistent boards yield 0.
    """
    pool = pool if pool is not None else BoardPool()
    try:
        return _exchange(board, target, attacker_piece, attacker_color, source, pool)
    except Exception as e:
        logger.warning("SEE failed for %s on %s: %s", attacker_piece, target, e)
        return 0


def see_of_move(board: Board, move: Move, *, pool: BoardPool | None = None) -> int:
    """SEE of the piece on move.from_sq landing on move.to_sq (0 if no piece)."""
    piece = board.piece_at(move.from_sq)
    if piece is None:
        return 0
    if move.promotion:
        piece = chess.Piece(move.promotion, piece.color)
    return evaluate_exchange(board, move.to_sq, piece, piece.color, move.from_sq, pool=pool)


def capture_gain(
    board: Board, square: Square, by_color: chess.Color, *, pool: BoardPool | None = None,
) -> int:
    """Best exchange result for by_color capturing whatever stands on square.

    0 if by_color has no legal capture there. Negative when every capture
    loses material.
    """
    pool = pool if pool is not None else BoardPool()
    if board.piece_at(square) is None:
        return 0
    try:
        candidates = legal_captures(board, square, by_color)
    except Exception as e:
        logger.warning("capture_gain failed on %s: %s", square, e)
        return 0
    if not candidates:
        return 0
    return max(
        evaluate_exchange(board, square, board.piece_at(sq), by_color, sq, pool=pool)
        for _, sq in candidates
    )
