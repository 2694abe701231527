# app.py
"""
Main application entry point.
This module creates the Flask application instance and handles application startup.
"""

import os

from enrollment_intake import create_app

# Create the application instance
app = create_app(os.environ.get('FLASK_ENV', 'development'))


# Development server configuration
if __name__ == '__main__':
    # Only run directly in development
    port = int(os.environ.get('PORT', 5000))
    debug = os.environ.get('FLASK_ENV', 'development') == 'development'

    app.logger.info(f"Starting development server on port {port}, debug={debug}")

    app.run(
        host='0.0.0.0',
        port=port,
        debug=debug,
        threaded=True
    )
