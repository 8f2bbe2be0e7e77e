"""Script to clear all database records except the group's office bearers"""
from shg import create_app, db
from shg.models import (
    User, Role, Meeting, Attendance, MeetingPayment,
    Loan, LoanRequest, LoanType, ActivityLog
)

ADMIN_ROLES = [role.value for role in Role if role.is_admin_role()]

def clear_database_except_admin():
    """Clear all data from database except admin members"""
    app = create_app()

    with app.app_context():
        try:
            admin_users = User.query.filter(User.role.in_(ADMIN_ROLES)).all()

            if not admin_users:
                print("Warning: No secretary, president or treasurer found in database!")
                confirm = input("Continue clearing all data? (yes/no): ")
                if confirm.lower() != 'yes':
                    print("Operation cancelled.")
                    return
            else:
                print(f"Found {len(admin_users)} admin member(s) to preserve:")
                for user in admin_users:
                    print(f"  - {user.name} ({user.email}, {user.role})")

                confirm = input("\nProceed with clearing all other data? (yes/no): ")
                if confirm.lower() != 'yes':
                    print("Operation cancelled.")
                    return

            print("\nClearing database...")

            print("- Deleting activity logs...")
            ActivityLog.query.delete()

            print("- Deleting loan requests...")
            LoanRequest.query.delete()

            print("- Deleting loans...")
            Loan.query.delete()

            print("- Deleting meeting payments...")
            MeetingPayment.query.delete()

            print("- Deleting attendance...")
            Attendance.query.delete()

            print("- Deleting meetings...")
            Meeting.query.delete()

            print("- Deleting other members...")
            User.query.filter(User.role.notin_(ADMIN_ROLES)).delete(synchronize_session=False)

            # Loan types are configuration, not data
            # LoanType.query.delete()

            db.session.commit()

            print("\n✓ Database cleared successfully!")
            print(f"✓ Preserved {len(admin_users)} admin member(s)")
            print(f"✓ Kept {LoanType.query.count()} loan type(s)")

            remaining_users = User.query.all()
            print(f"\nRemaining members in database: {len(remaining_users)}")
            for user in remaining_users:
                print(f"  - {user.name} ({user.role})")

        except Exception as e:
            db.session.rollback()
            print(f"\n✗ Error clearing database: {str(e)}")
            raise

if __name__ == '__main__':
    clear_database_except_admin()
