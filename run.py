import os
from smart_library import create_app, db

# Create application instance
app = create_app(os.getenv('FLASK_ENV', 'development'))


@app.shell_context_processor
def make_shell_context():
    """Add database instance and models to shell context"""
    from smart_library.models import User, Admin, Booking, Seat, Plan, Payment
    return {'db': db, 'User': User, 'Admin': Admin, 'Booking': Booking, 'Seat': Seat, 'Plan': Plan,
            'Payment': Payment}


if __name__ == '__main__':
    app.run(host='0.0.0.0', port=int(os.getenv('PORT', '5000')), debug=app.config.get('DEBUG', False))
