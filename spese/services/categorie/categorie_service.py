"""
Servizio per la gestione delle categorie
"""
from spese.defaults import CATEGORIE_DEFAULT
from spese.models.categories import Category
from spese.services import BaseService


class CategorieService(BaseService):
    """Servizio per la gestione delle categorie"""

    def get_all_categories(self, user_id, transaction_type=None):
        """Recupera le categorie non eliminate dell'utente"""
        query = Category.query.filter_by(user_id=user_id, softdelete=False)
        if transaction_type:
            query = query.filter(
                (Category.transaction_type == transaction_type) | (Category.transaction_type.is_(None))
            )
        return query.order_by(Category.name.asc()).all()

    def create_categoria(self, user_id, name, transaction_type=None, color=None, icon=None):
        """Crea una nuova categoria"""
        if not name or not name.strip():
            return False, "Il nome della categoria è obbligatorio", None
        if transaction_type not in (None, 'expense', 'income'):
            return False, "Il tipo deve essere 'expense' o 'income'", None

        name = name.strip()
        existing = Category.query.filter_by(user_id=user_id, name=name, softdelete=False).first()
        if existing:
            return False, f"Categoria '{name}' già esistente", None

        categoria = Category(
            user_id=user_id, name=name, transaction_type=transaction_type,
            color=color, icon=icon, softdelete=False,
        )
        success, message = self.save(categoria)
        if not success:
            return False, message, None
        return True, f"Categoria '{name}' creata con successo", categoria

    def delete_categoria(self, categoria_id, user_id):
        """Elimina (soft delete) una categoria: le transazioni mantengono il nome salvato"""
        categoria = self.db.session.get(Category, categoria_id)
        if not categoria or categoria.softdelete or categoria.user_id != user_id:
            return False, "Categoria non trovata"
        return self.soft_delete(categoria)

    def initialize_defaults(self, user_id):
        """Crea le categorie predefinite mancanti per l'utente"""
        esistenti = {c.name for c in Category.query.filter_by(user_id=user_id, softdelete=False)}
        creati = 0
        for name in CATEGORIE_DEFAULT:
            if name in esistenti:
                continue
            self.db.session.add(Category(user_id=user_id, name=name, transaction_type='expense', softdelete=False))
            creati += 1
        try:
            self.db.session.commit()
        except Exception as e:
            self.db.session.rollback()
            return False, str(e)
        return True, f"{creati} categorie predefinite create"
