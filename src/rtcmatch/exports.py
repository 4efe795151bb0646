"""
Export Module for rtcmatch
Names the draw template's text frames and generates the Round 1 draw sheet
as an Excel workbook.
"""

import io
from datetime import datetime
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from rtcmatch.handicap_rounding import process_handicap_for_display
from rtcmatch.models import Bracket, Participant, PlacementStats


def frame_name(round_number: int, match_number: int, player_number: int, seed: bool = False) -> str:
    """Template frame name for a player position, e.g. ``R1_M3_P2``.

    Examples:
        >>> frame_name(1, 3, 2)
        'R1_M3_P2'
        >>> frame_name(1, 3, 2, seed=True)
        'R1_M3_P2_SEED'
    """
    name = f"R{round_number}_M{match_number}_P{player_number}"
    return f"{name}_SEED" if seed else name


def template_frames(bracket_size: int) -> list[str]:
    """Every Round 1 player frame the template needs for ``bracket_size``."""
    frames = []
    for match_number in range(1, bracket_size // 2 + 1):
        frames.append(frame_name(1, match_number, 1))
        frames.append(frame_name(1, match_number, 2))
    return frames


def player_frame_text(participant: Optional[Participant], event_name: str = "") -> str:
    """Text written into a player frame: name plus "(handicap)" when known.

    BYEs and empty positions produce an empty string.
    """
    if participant is None or participant.is_bye:
        return ""
    text = participant.name
    handicap = process_handicap_for_display(participant.handicap, event_name)
    if handicap:
        text += f" ({handicap})"
    return text


def seed_label(participant: Optional[Participant]) -> str:
    """Text for a seed frame, e.g. "(12)"."""
    if participant is None or participant.is_bye or not participant.seed:
        return ""
    return f"({participant.seed})"


def _style_header_row(ws, num_cols: int):
    """Apply consistent header styling to the first row."""
    header_font = Font(bold=True, color="FFFFFF", size=11)
    header_fill = PatternFill(start_color="333333", end_color="333333", fill_type="solid")
    header_alignment = Alignment(horizontal="center", vertical="center")
    thin_border = Border(
        left=Side(style="thin"),
        right=Side(style="thin"),
        top=Side(style="thin"),
        bottom=Side(style="thin"),
    )
    for col in range(1, num_cols + 1):
        cell = ws.cell(row=1, column=col)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment
        cell.border = thin_border


def _auto_width(ws):
    """Auto-adjust column widths based on content."""
    for column_cells in ws.columns:
        max_length = max((len(str(cell.value)) for cell in column_cells if cell.value is not None), default=0)
        column_letter = column_cells[0].column_letter
        ws.column_dimensions[column_letter].width = max(min(max_length + 3, 40), 8)


def generate_draw_excel(
    bracket: Bracket,
    event_name: str = "",
    stats: Optional[PlacementStats] = None,
) -> bytes:
    """
    Generate the Round 1 draw sheet workbook.

    Sheets:
    - "Draw": one row per player position with its template frame
    - "Summary": bracket and placement figures

    Returns: Excel file as bytes.
    """
    wb = Workbook()

    # --- Sheet 1: Draw ---
    ws_draw = wb.active
    ws_draw.title = "Draw"
    headers = ["Match", "Frame", "Player", "Handicap", "Seed", "Winner"]
    ws_draw.append(headers)
    _style_header_row(ws_draw, len(headers))

    play_in_fill = PatternFill(start_color="FFF9C4", end_color="FFF9C4", fill_type="solid")
    for match in bracket.round1.matches:
        for player_number, player in ((1, match.player1), (2, match.player2)):
            is_bye = player is None or player.is_bye
            ws_draw.append([
                match.match_number,
                frame_name(1, match.match_number, player_number),
                "BYE" if is_bye else player.name,
                "" if is_bye else process_handicap_for_display(player.handicap, event_name),
                "" if is_bye else (player.seed or ""),
                "YES" if match.winner is not None and match.winner is player else "",
            ])
            if match.is_play_in:
                for col in range(1, len(headers) + 1):
                    ws_draw.cell(row=ws_draw.max_row, column=col).fill = play_in_fill
    _auto_width(ws_draw)

    # --- Sheet 2: Summary ---
    ws_summary = wb.create_sheet("Summary")
    headers = ["Item", "Value"]
    ws_summary.append(headers)
    _style_header_row(ws_summary, len(headers))
    ws_summary.append(["Event", event_name])
    ws_summary.append(["Bracket size", bracket.bracket_size])
    ws_summary.append(["Participants", bracket.participant_count])
    if stats is not None:
        for key, value in stats.to_dict().items():
            ws_summary.append([key.replace("_", " ").capitalize(), "" if value is None else value])
    ws_summary.append(["Exported", datetime.now().strftime("%d/%m/%Y %H:%M")])
    _auto_width(ws_summary)

    # Save to bytes
    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output.read()
