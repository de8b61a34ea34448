"""Article portal: pagination links and CSRF protection."""
