from qodo_bridge.cli import app

if __name__ == "__main__":
    app()
