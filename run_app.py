"""Desktop launcher for the book list.

Starts the Django development server, opens the book list in the
default browser once the server accepts connections and keeps a tray
icon with a Quit entry.
"""
import io
import os
import socket
import sys
import threading
import time
import webbrowser

from django.core.management import execute_from_command_line
from PIL import Image, ImageDraw
from pystray import Icon, Menu, MenuItem

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "librarysite.settings")

HOST = os.environ.get("BOOKLIST_HOST", "127.0.0.1")
PORT = int(os.environ.get("BOOKLIST_PORT", "8000"))


def get_icon_path():
    """Return the path of ``favicon.png`` next to this file, or ``None``."""
    base_path = os.path.dirname(os.path.abspath(__file__))
    icon_path = os.path.join(base_path, 'favicon.png')
    return icon_path if os.path.exists(icon_path) else None


def load_icon_image():
    """Load the tray image, drawing a plain book glyph when no icon file exists."""
    icon_path = get_icon_path()
    if icon_path:
        return Image.open(icon_path)
    image = Image.new('RGB', (64, 64), color='navy')
    draw = ImageDraw.Draw(image)
    draw.rectangle((16, 12, 48, 52), fill='white')
    draw.line((32, 12, 32, 52), fill='navy', width=2)
    return image


def create_tray_icon():
    def on_quit(icon, item):
        icon.stop()
        os._exit(0)

    menu = Menu(
        MenuItem('Open Book List', lambda icon, item: webbrowser.open_new(book_list_url())),
        MenuItem('Quit', on_quit),
    )
    icon = Icon("BookList", load_icon_image(), "Book List Server", menu)
    icon.run()


def book_list_url():
    return f"http://{HOST}:{PORT}/books/"


def wait_for_server(host=HOST, port=PORT, timeout=20):
    """Wait until the Django dev server is accepting connections."""
    start = time.time()
    while time.time() - start < timeout:
        try:
            with socket.create_connection((host, port), timeout=1):
                return True
        except OSError:
            time.sleep(0.2)
    return False


def open_browser_when_ready():
    if wait_for_server():
        webbrowser.open_new(book_list_url())


def run_server():
    if sys.stdout is None:
        sys.stdout = io.StringIO()
    if sys.stderr is None:
        sys.stderr = io.StringIO()

    threading.Thread(target=open_browser_when_ready, daemon=True).start()

    threading.Thread(target=create_tray_icon, daemon=False).start()

    execute_from_command_line(["manage.py", "migrate", "--noinput"])
    execute_from_command_line(["manage.py", "runserver", f"{HOST}:{PORT}", "--noreload"])


if __name__ == "__main__":
    run_server()
