# bidtracker/services/backends.py
# Record stores behind the data service: Supabase (remote) and SQLAlchemy (local fallback)

import logging
from datetime import datetime

from bidtracker.models import db, Job, Estimator, User

logger = logging.getLogger(__name__)


class SupabaseStore:
    """Remote document store and auth backed by a Supabase project"""

    name = 'remote'

    def __init__(self, client):
        self.client = client

    @classmethod
    def from_credentials(cls, url, key):
        from supabase import create_client
        logger.info(f"Creating Supabase client for {url}")
        return cls(create_client(url, key))

    def list(self, table, order_by=None, desc=False):
        query = self.client.table(table).select('*')
        if order_by:
            query = query.order(order_by, desc=desc)
        response = query.execute()
        return response.data or []

    def get(self, table, record_id):
        response = self.client.table(table).select('*').eq('id', record_id).execute()
        return response.data[0] if response.data else None

    def insert(self, table, row):
        response = self.client.table(table).insert(row).execute()
        return response.data[0] if response.data else dict(row)

    def update(self, table, record_id, row):
        response = self.client.table(table).update(row).eq('id', record_id).execute()
        if not response.data:
            raise LookupError(f"No {table} record with id {record_id}")
        return response.data[0]

    def delete(self, table, record_id):
        response = self.client.table(table).delete().eq('id', record_id).execute()
        if not response.data:
            raise LookupError(f"No {table} record with id {record_id}")
        return True

    # Authentication
    @staticmethod
    def _identity(user):
        metadata = getattr(user, 'user_metadata', None) or {}
        return {
            'uid': str(user.id),
            'email': user.email,
            'display_name': metadata.get('display_name'),
        }

    def sign_in(self, email, password):
        response = self.client.auth.sign_in_with_password({'email': email, 'password': password})
        if response.user is None:
            raise PermissionError("Invalid login credentials")
        return self._identity(response.user)

    def sign_up(self, email, password, display_name=None):
        payload = {'email': email, 'password': password}
        if display_name:
            payload['options'] = {'data': {'display_name': display_name}}
        response = self.client.auth.sign_up(payload)
        if response.user is None:
            raise RuntimeError("Signup failed. No user returned.")
        return self._identity(response.user)

    def sign_out(self):
        self.client.auth.sign_out()


class LocalStore:
    """Fallback store kept in the application's SQLAlchemy database"""

    name = 'local'

    MODELS = {
        'jobs': Job,
        'estimators': Estimator,
    }

    def _model(self, table):
        try:
            return self.MODELS[table]
        except KeyError:
            raise ValueError(f"Unknown table '{table}'")

    def list(self, table, order_by=None, desc=False):
        model = self._model(table)
        query = model.query
        if order_by:
            column = getattr(model, order_by)
            query = query.order_by(column.desc() if desc else column.asc())
        return [record.to_dict() for record in query.all()]

    def get(self, table, record_id):
        record = db.session.get(self._model(table), record_id)
        return record.to_dict() if record else None

    def insert(self, table, row):
        model = self._model(table)
        record = model(id=row['id']) if row.get('id') else model()
        record.apply(row)
        try:
            db.session.add(record)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return record.to_dict()

    def update(self, table, record_id, row):
        record = db.session.get(self._model(table), record_id)
        if record is None:
            raise LookupError(f"No {table} record with id {record_id}")
        record.apply(row)
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return record.to_dict()

    def delete(self, table, record_id):
        record = db.session.get(self._model(table), record_id)
        if record is None:
            raise LookupError(f"No {table} record with id {record_id}")
        try:
            db.session.delete(record)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return True

    # Authentication
    def sign_in(self, email, password):
        user = User.query.filter_by(email=email).first()
        if not user or not user.check_password(password):
            raise PermissionError("Invalid login credentials")
        if not user.is_active:
            raise PermissionError("Account is disabled")
        return {'uid': str(user.id), 'email': user.email, 'display_name': user.display_name}

    def sign_up(self, email, password, display_name=None):
        if User.query.filter_by(email=email).first():
            raise ValueError("User already registered")
        user = User(email=email, display_name=display_name, last_login=datetime.utcnow())
        user.set_password(password)
        try:
            db.session.add(user)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return {'uid': str(user.id), 'email': user.email, 'display_name': user.display_name}

    def sign_out(self):
        pass
