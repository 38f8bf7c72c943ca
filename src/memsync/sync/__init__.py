"""Platform sync: push the rendered template to every configured destination."""
