from pagetranslate.cli import app


def main():
    """Main application entry point."""
    app()


if __name__ == "__main__":
    main()
