"""Modello per le categorie di transazioni"""
from spese import db


class Category(db.Model):
    __tablename__ = 'categories'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    transaction_type = db.Column(db.String(20), nullable=True)  # 'expense', 'income' o None
    color = db.Column(db.String(20), nullable=True)
    icon = db.Column(db.String(50), nullable=True)
    softdelete = db.Column(db.Boolean, nullable=False, default=False)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'transaction_type': self.transaction_type,
            'color': self.color,
            'icon': self.icon,
        }

    def __repr__(self):
        return f'<Category {self.name} ({self.transaction_type})>'
