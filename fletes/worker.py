# fletes/worker.py

import signal
import time

from sqlalchemy.exc import SQLAlchemyError

from fletes import create_app
from fletes.extensions import db
from fletes.services.mailer import get_sender
from fletes.services.notifications import process_pending
from fletes.utils.logging import get_logger

logger = get_logger("worker")

STOP = False
BATCH_SIZE = 20


def _handle_stop(signum, frame):
    global STOP
    STOP = True
    logger.info(f"Señal recibida ({signum}). Cerrando worker con gracia...")


def main():
    # Señales típicas en Render al detener/redeploy
    signal.signal(signal.SIGTERM, _handle_stop)
    signal.signal(signal.SIGINT, _handle_stop)

    app = create_app()
    poll_seconds = int(app.config.get("WORKER_POLL_SECONDS", 3))

    logger.info("Worker de notificaciones iniciado. Esperando tareas...")

    with app.app_context():
        sender = get_sender()

        while not STOP:
            try:
                result = process_pending(limit=BATCH_SIZE, sender=sender)

                if not result["sent"] and not result["failed"]:
                    time.sleep(poll_seconds)
                    continue

                logger.info(f"Lote procesado: enviados={result['sent']} fallidos={result['failed']}")

            except SQLAlchemyError as e:
                logger.error(f"Error de base de datos en worker: {e}")
                db.session.rollback()

                # Evitar loop súper rápido en caso de error persistente
                time.sleep(max(poll_seconds, 3))

            finally:
                # En procesos infinitos: limpiar sesión al final de cada vuelta
                db.session.remove()

    logger.info("Worker detenido.")


if __name__ == "__main__":
    main()
