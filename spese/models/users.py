"""Modello per gli utenti (proprietari di tutti i record)"""
from spese import db


class User(db.Model):
    """Utente risolto dal provider di identità esterno"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    auth_subject = db.Column(db.String(200), nullable=False, unique=True)
    email = db.Column(db.String(200), nullable=False)
    softdelete = db.Column(db.Boolean, nullable=False, default=False)

    def __repr__(self):
        return f'<User {self.email}>'
