#!/usr/bin/env python3
"""Application entry point"""
import os
import sys
from datetime import date
from decimal import Decimal

DEFAULT_LOAN_TYPES = [
    ('Standard', Decimal('2.00')),
    ('Emergency', Decimal('1.50')),
    ('Business', Decimal('2.50')),
]

def init_database():
    """Initialize the database"""
    from shg import create_app, db
    app = create_app(os.getenv('FLASK_ENV') or 'development')
    with app.app_context():
        db.create_all()
        print("Database initialized!")

def create_admin_user():
    """Create the secretary account"""
    from shg import create_app, db
    from shg.models import User, Role

    app = create_app(os.getenv('FLASK_ENV') or 'development')

    with app.app_context():
        # Create tables if they don't exist
        db.create_all()

        # Check if admin already exists
        existing_admin = User.query.filter_by(username='secretary').first()
        if existing_admin:
            print("Secretary account already exists!")
            return

        admin = User(
            name='Group Secretary',
            email='secretary@example.org',
            username='secretary',
            role=Role.SECRETARY.value,
            joining_date=date.today(),
            is_active=True
        )
        admin.set_password('admin123')
        db.session.add(admin)

        try:
            db.session.commit()
            print("Secretary account created successfully!")
            print("Username: secretary")
            print("Password: admin123")
            print("Please change the password after first login!")
        except Exception as e:
            db.session.rollback()
            print("Error: {}".format(e))

def seed_loan_types():
    """Create the default loan types"""
    from shg import create_app, db
    from shg.models import LoanType

    app = create_app(os.getenv('FLASK_ENV') or 'development')

    with app.app_context():
        db.create_all()
        added = 0
        for name, rate in DEFAULT_LOAN_TYPES:
            if LoanType.query.filter_by(name=name).first():
                continue
            db.session.add(LoanType(name=name, interest_rate=rate))
            added += 1
        db.session.commit()
        print("Added {} loan type(s)".format(added))

if __name__ == '__main__':
    # Handle command-line arguments
    if len(sys.argv) > 1:
        command = sys.argv[1]
        if command == 'create-admin':
            create_admin_user()
        elif command == 'init-db':
            init_database()
        elif command == 'seed-loan-types':
            seed_loan_types()
        else:
            print("Unknown command: {}".format(command))
            print("Available commands: create-admin, init-db, seed-loan-types")
            sys.exit(1)
    else:
        # Run the Flask development server
        from shg import create_app
        app = create_app(os.getenv('FLASK_ENV') or 'development')
        app.run(host='0.0.0.0', port=5000, debug=app.config.get('DEBUG', False))
