"""WSGI entry point: ``flask --app app run`` or ``gunicorn app:app`` after ``pip install -e .``."""

from timeclock.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=app.config.get("DEBUG", False))
