"""kitty-pane-bg - tmux pane layout as a kitty background image"""

__version__ = "0.1.0"
