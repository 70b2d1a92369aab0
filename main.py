import sys

import pygame

from level_client import LevelClient, LocalLevelProvider
from session import Scheduler, SessionController
from settings import load_settings
from shared.models import (
    CompletionReason, Completed, LevelStarted, PairResolved, ScoreChanged, TimeTicked
)

# Memory optimization - limit pygame features we don't need
pygame.display.init()
pygame.font.init()

# Colors
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
BLUE = (0, 100, 255)
GREEN = (0, 200, 0)
RED = (200, 0, 0)
CARD_BACK_COLOR = (50, 50, 200)
CARD_FRONT_COLOR = (220, 220, 255)
CARD_MATCHED_COLOR = (200, 255, 200)

# Asset key -> card face color. Unknown keys use the default entry.
ASSET_COLORS = {
    "strawberry": (230, 40, 70), "banana": (245, 220, 60), "kiwi": (120, 170, 50),
    "orange": (250, 150, 30), "grape": (120, 60, 160), "apple": (200, 30, 30),
    "cherry": (160, 0, 40), "lemon": (250, 240, 110), "peach": (255, 190, 150),
    "pear": (200, 220, 90), "watermelon": (60, 160, 80), "pineapple": (230, 190, 40),
    "mango": (255, 170, 50), "blueberry": (70, 90, 200), "raspberry": (210, 40, 110),
    "plum": (110, 40, 100), "fig": (140, 90, 110), "lime": (150, 210, 60),
    "coconut": (130, 90, 60), "apricot": (250, 180, 100), "default": (150, 150, 150),
}

# Fonts
FONT_SMALL = pygame.font.SysFont('Arial', 20)
FONT_MEDIUM = pygame.font.SysFont('Arial', 30)
FONT_CARD = pygame.font.SysFont('Arial', 18, bold=True)

# Game settings
FPS = 60
CARD_MARGIN = 10


def get_level_provider(mode="local", server_url=None):
    """
    Factory function to get the level provider.

    Args:
        mode: 'local' to generate levels in-process, 'remote' to use the level server
        server_url: URL of the level server, required for 'remote' mode
    """
    if mode == "remote" and server_url:
        client = LevelClient(server_url)
        if client.check_server_connection():
            print(f"Using level server at {client.server_url}")
            return client
        print("Level server unavailable - falling back to local levels")
    return LocalLevelProvider()


class GameGUI:
    """Graphical user interface for the memory card game."""

    def __init__(self, controller: SessionController):
        self.controller = controller
        self.clock = pygame.time.Clock()
        self.screen = None
        self.width = 800
        self.height = 600
        self.board_margin_top = 100
        self.message = ""
        self.score = 0
        self.time_remaining = None
        self.completed = None
        controller.subscribe(self.on_event)

    def setup_window(self):
        """Set up the game window."""
        self.screen = pygame.display.set_mode((self.width, self.height))
        pygame.display.set_caption("Memory Match")

    def on_event(self, event):
        """Keep the displayed state in step with the session."""
        if isinstance(event, LevelStarted):
            self.score = 0
            self.time_remaining = event.time_limit
            self.completed = None
            self.message = f"Level {event.level} - Go!"
        elif isinstance(event, PairResolved):
            self.message = "Match found!" if event.matched else "No match"
        elif isinstance(event, ScoreChanged):
            self.score = event.new_score
        elif isinstance(event, TimeTicked):
            self.time_remaining = event.time_remaining
        elif isinstance(event, Completed):
            self.completed = event
            if event.reason is CompletionReason.SOLVED:
                self.message = f"Level complete! {event.moves} moves - N: next level"
            else:
                self.message = "Time's up! R: try again"

    def card_size(self):
        board = self.controller.engine.board
        width = (self.width - CARD_MARGIN * (board.cols + 1)) // board.cols
        height = (self.height - self.board_margin_top - CARD_MARGIN * (board.rows + 1)) // board.rows
        return width, height

    def get_card_rect(self, row, col):
        """Get the rectangle for a card at the given position."""
        width, height = self.card_size()
        x = CARD_MARGIN + col * (width + CARD_MARGIN)
        y = self.board_margin_top + row * (height + CARD_MARGIN)
        return pygame.Rect(x, y, width, height)

    def get_card_at_pos(self, pos):
        """Get the card position at the given screen position."""
        board = self.controller.engine.board
        for row in range(board.rows):
            for col in range(board.cols):
                if self.get_card_rect(row, col).collidepoint(pos):
                    return row, col
        return None

    def draw_card(self, card, rect):
        """Draw a card on the screen."""
        if card.is_face_up:
            background = CARD_MATCHED_COLOR if card.is_matched else CARD_FRONT_COLOR
            pygame.draw.rect(self.screen, background, rect, 0, 5)
            pygame.draw.rect(self.screen, GREEN if card.is_matched else BLUE, rect, 2, 5)
            color = ASSET_COLORS.get(card.asset_key, ASSET_COLORS["default"])
            pygame.draw.circle(self.screen, color, rect.center, min(rect.width, rect.height) // 4)
            text = FONT_CARD.render(card.asset_key or str(card.value), True, BLACK)
            self.screen.blit(text, (rect.centerx - text.get_width() // 2, rect.bottom - text.get_height() - 4))
        else:
            pygame.draw.rect(self.screen, CARD_BACK_COLOR, rect, 0, 5)
            pygame.draw.rect(self.screen, BLUE, rect, 2, 5)

    def draw_ui(self):
        """Draw the score, moves, timer and the current message."""
        engine = self.controller.engine
        stats = f"Level {engine.level.level_number}   Score: {self.score}   Moves: {engine.moves}"
        if self.time_remaining is not None:
            stats += f"   Time: {self.time_remaining}s"
        self.screen.blit(FONT_SMALL.render(stats, True, WHITE), (10, 10))
        if self.message:
            color = RED if self.completed and self.completed.reason is CompletionReason.TIMED_OUT else WHITE
            text = FONT_MEDIUM.render(self.message, True, color)
            self.screen.blit(text, (self.width // 2 - text.get_width() // 2, 45))

    def draw(self):
        self.screen.fill(BLACK)
        board = self.controller.engine.board
        for row in range(board.rows):
            for col in range(board.cols):
                self.draw_card(board.get_card(row, col), self.get_card_rect(row, col))
        self.draw_ui()
        pygame.display.flip()

    def run_game(self, level=1):
        """Run the game loop."""
        self.controller.start(level)

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.MOUSEBUTTONDOWN:
                    card_pos = self.get_card_at_pos(event.pos)
                    if card_pos:
                        self.controller.flip(*card_pos)
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_r:
                        self.controller.restart()
                    elif event.key == pygame.K_n:
                        self.controller.advance()

            # Fire due resolutions and countdown ticks
            self.controller.scheduler.run_pending()
            self.draw()
            self.clock.tick(FPS)

        self.controller.stop()


def main():
    """Main function to run the game."""
    settings = load_settings()
    mode = "remote" if "--remote" in sys.argv else "local"
    provider = get_level_provider(mode=mode, server_url=settings.server_url)

    controller = SessionController(provider, Scheduler(), settings)
    gui = GameGUI(controller)
    gui.setup_window()
    gui.run_game()
    pygame.quit()


if __name__ == "__main__":
    main()
