"""
Modello per i tipi di pagamento

Un tipo di pagamento di credito (carta) ha un giorno di chiusura dell'estratto
conto e un giorno di scadenza (1-31): vedi
``spese.utils.scheduling.calculate_next_due_date_for_payment_type``.
"""
from spese import db


class PaymentType(db.Model):
    __tablename__ = 'payment_types'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    is_credit = db.Column(db.Boolean, nullable=False, default=False)
    closing_day = db.Column(db.Integer, nullable=True)
    due_day = db.Column(db.Integer, nullable=True)
    softdelete = db.Column(db.Boolean, nullable=False, default=False)
    deleted_at = db.Column(db.BigInteger, nullable=True)

    __table_args__ = (
        db.Index('ix_payment_types_user_softdelete', 'user_id', 'softdelete'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'is_credit': bool(self.is_credit),
            'closing_day': self.closing_day,
            'due_day': self.due_day,
        }

    def __repr__(self):
        return f'<PaymentType {self.name} credit={self.is_credit}>'
